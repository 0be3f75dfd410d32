# api/routers/skills.py

from fastapi import APIRouter, HTTPException, Depends

from ..database import get_graph_db_session, GraphDBSession
from .. import graph_crud, schemas


# --- Router ---

router = APIRouter()


@router.get("/graph/{namespace}/path/{source_id}/{target_id}", response_model=schemas.SkillPath, response_model_by_alias=False, tags=["Skill Graph"])
def get_skill_path(
    namespace: str,
    source_id: str,
    target_id: str,
    db: GraphDBSession = Depends(get_graph_db_session),
):
    """
    Finds the shortest prerequisite path between two skills.
    The source is left out of the path; the target is its last element.
    """
    graph = db.execute_read(graph_crud.load_skill_graph, namespace)
    for skill_id in (source_id, target_id):
        if skill_id not in graph:
            raise HTTPException(status_code=404, detail=f"Skill '{skill_id}' not found in graph")

    path = graph.shortest_path(source_id, target_id)
    return {
        "source_id": source_id,
        "target_id": target_id,
        "path": path,
        "reachable": bool(path) or source_id == target_id,
    }


@router.get("/graph/{namespace}/subjects/{subject_id}/next", response_model=schemas.NextSkills, response_model_by_alias=False, tags=["Skill Graph"])
def get_next_skills(
    namespace: str,
    subject_id: str,
    db: GraphDBSession = Depends(get_graph_db_session),
):
    """
    Lists the skills one prerequisite hop away from what the subject has mastered.
    """
    graph = db.execute_read(graph_crud.load_skill_graph, namespace)
    mastered = db.execute_read(graph_crud.get_mastered_skills, namespace, subject_id)
    next_ids = graph.reachable_next_skills(mastered)
    return {
        "subject_id": subject_id,
        "skills": [graph.skill(skill_id) for skill_id in next_ids if skill_id in graph],
    }
