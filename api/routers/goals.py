from fastapi import APIRouter, HTTPException, Depends, Request, Response

from skill_system.errors import GoalStoreError, UnresolvableGoalError
from skill_system.goals import GoalStateManager

# Database Imports
from ..database import get_graph_db_session, GraphDBSession
from .. import graph_crud
from .. import schemas

router = APIRouter()


def get_goal_manager(request: Request) -> GoalStateManager:
    return request.app.state.goal_manager


async def _ensure_loaded(manager: GoalStateManager, subject_id: str, namespace: str, skills):
    """Pulls the persisted goal into memory unless one is already active."""
    if manager.get_state(subject_id, namespace).current_goal is None:
        await manager.load_goal(subject_id, namespace, skills)


@router.get("/goals/{namespace}/{subject_id}", response_model=schemas.GoalStateResponse, response_model_by_alias=False, tags=["Goals"])
async def read_goal(
    namespace: str,
    subject_id: str,
    db: GraphDBSession = Depends(get_graph_db_session),
    manager: GoalStateManager = Depends(get_goal_manager),
):
    """
    Loads the subject's saved goal, resolving it against the namespace's skill catalog.
    """
    skills = db.execute_read(graph_crud.get_skill_catalog, namespace)
    try:
        state = await manager.load_goal(subject_id, namespace, skills)
    except GoalStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"namespace": namespace, "subject_id": subject_id, "state": state}


@router.put("/goals/{namespace}/{subject_id}", response_model=schemas.GoalUpdateResponse, response_model_by_alias=False, tags=["Goals"])
async def choose_goal(
    namespace: str,
    subject_id: str,
    choice: schemas.GoalChoice,
    db: GraphDBSession = Depends(get_graph_db_session),
    manager: GoalStateManager = Depends(get_goal_manager),
):
    """
    Sets a goal skill for the subject and returns the planned path with progress.
    Re-choosing the active goal keeps its progress baseline.
    """
    graph = db.execute_read(graph_crud.load_skill_graph, namespace)
    mastered = db.execute_read(graph_crud.get_mastered_skills, namespace, subject_id)
    try:
        await _ensure_loaded(manager, subject_id, namespace, graph.skills.values())
        goal_path, progress = manager.choose_goal(
            subject_id, namespace, choice.goal_skill_id, graph, mastered
        )
    except UnresolvableGoalError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoalStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "namespace": namespace,
        "subject_id": subject_id,
        "state": manager.get_state(subject_id, namespace),
        "path": goal_path,
        "progress": progress,
    }


@router.post("/goals/{namespace}/{subject_id}/refresh", response_model=schemas.GoalUpdateResponse, response_model_by_alias=False, tags=["Goals"])
async def refresh_goal(
    namespace: str,
    subject_id: str,
    db: GraphDBSession = Depends(get_graph_db_session),
    manager: GoalStateManager = Depends(get_goal_manager),
):
    """
    Re-plans the subject's goal after their mastered skills changed.
    """
    graph = db.execute_read(graph_crud.load_skill_graph, namespace)
    mastered = db.execute_read(graph_crud.get_mastered_skills, namespace, subject_id)
    try:
        await _ensure_loaded(manager, subject_id, namespace, graph.skills.values())
        result = manager.refresh_progress(subject_id, namespace, graph, mastered)
    except UnresolvableGoalError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoalStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if result is None:
        raise HTTPException(status_code=404, detail=f"No goal set for subject '{subject_id}'")
    goal_path, progress = result
    return {
        "namespace": namespace,
        "subject_id": subject_id,
        "state": manager.get_state(subject_id, namespace),
        "path": goal_path,
        "progress": progress,
    }


@router.delete("/goals/{namespace}/{subject_id}", status_code=204, tags=["Goals"])
def clear_goal(
    namespace: str,
    subject_id: str,
    manager: GoalStateManager = Depends(get_goal_manager),
):
    """
    Clears the subject's goal. Clearing a subject without a goal is not an error.
    """
    try:
        manager.clear_goal(subject_id, namespace)
    except GoalStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return Response(status_code=204)
