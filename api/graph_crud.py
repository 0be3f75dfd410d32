from typing import List

from skill_system.models import PrerequisiteEdge, Skill, SkillGraph

# Read Operations
#
# Skills carry a `source` property naming the data source (the goal namespace).
# (s)-[:DEPENDS_ON]->(pre) means `pre` must be mastered before `s`.


def get_skill_catalog(tx, namespace) -> List[Skill]:
    """
    Retrieves every skill node of a data source.
    This function is designed to be called within a transaction
    """
    query = """
    MATCH (s:Skill {source: $namespace})
    RETURN s.id AS id, s.name AS name, s.category AS category, s.level AS level,
           s.xp_required AS xp_required, s.description AS description
    ORDER BY s.id
    """
    result = tx.run(query, namespace=namespace)
    skills = []
    for record in result:
        skills.append(
            Skill(
                id=record["id"],
                name=record["name"],
                category=record["category"],
                level=record.get("level") or 0,
                xp_required=record.get("xp_required") or 0,
                description=record.get("description") or "",
            )
        )
    return skills


def get_prerequisite_edges(tx, namespace) -> List[PrerequisiteEdge]:
    """
    Retrieves all DEPENDS_ON relationships of a data source as prerequisite edges.
    """
    query = """
    MATCH (s:Skill {source: $namespace})-[:DEPENDS_ON]->(pre:Skill)
    RETURN pre.id AS from_id, s.id AS to_id
    ORDER BY from_id, to_id
    """
    result = tx.run(query, namespace=namespace)
    return [
        PrerequisiteEdge(from_id=record["from_id"], to_id=record["to_id"])
        for record in result
    ]


def get_mastered_skills(tx, namespace, subject_id) -> List[str]:
    """
    Retrieves the ids of all skills a subject has mastered.
    """
    query = """
    MATCH (e:Employee {id: $subject_id, source: $namespace})-[:HAS_MASTERED]->(s:Skill)
    RETURN s.id AS skill_id
    ORDER BY s.id
    """
    result = tx.run(query, namespace=namespace, subject_id=subject_id)
    return [record["skill_id"] for record in result]


def load_skill_graph(tx, namespace) -> SkillGraph:
    """Builds a SkillGraph from one consistent read of a data source."""
    return SkillGraph.build(
        get_skill_catalog(tx, namespace), get_prerequisite_edges(tx, namespace)
    )
