"""Task template catalogue endpoints."""

from fastapi import APIRouter

from interview_studio.schemas.interviews import TaskTemplate
from interview_studio.services.templates import TASK_TEMPLATES, get_template

router = APIRouter()


@router.get("", response_model=list[TaskTemplate])
async def list_task_templates():
    """List the templates offered when adding a task."""
    return TASK_TEMPLATES


@router.get("/{template_id}", response_model=TaskTemplate)
async def get_task_template(template_id: str):
    return get_template(template_id)
