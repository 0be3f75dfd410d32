import time
from sqlalchemy import create_engine

from api.database import DATABASE_URL, metadata

# Give the database a moment to start up
time.sleep(5)

print("Creating goal tables...")
metadata.create_all(bind=create_engine(DATABASE_URL))
print("Tables created successfully.")
