"""Fixed catalogue of task templates offered by the editor."""

from interview_studio.middleware.error_handler import NotFoundError
from interview_studio.schemas.interviews import CriterionSeed, TaskRequirements, TaskTemplate

TASK_TEMPLATES: list[TaskTemplate] = [
    TaskTemplate(
        id="behavioral",
        name="Behavioral Questions",
        description="Standard behavioral interview questions",
        default_prompt=(
            'Start with "Tell me about yourself" and follow up with behavioral questions '
            "about teamwork, leadership, and handling challenges."
        ),
        default_behavior="neutral",
        default_duration=10,
        default_requirements=TaskRequirements(audio=True, webcam=True),
        suggested_criteria=[
            CriterionSeed(
                name="Depth of Answer",
                description="How detailed and thoughtful the responses are",
            ),
            CriterionSeed(
                name="Clarity",
                description="How clearly the candidate communicates",
            ),
        ],
    ),
    TaskTemplate(
        id="merger-math",
        name="Merger Math",
        description="M&A financial modeling exercise",
        default_prompt=(
            "Present a merger scenario with Company A acquiring Company B. Provide financial "
            "data and ask the candidate to calculate the deal value, synergies, and "
            "accretion/dilution analysis."
        ),
        default_behavior="active",
        default_duration=25,
        default_requirements=TaskRequirements(audio=True, screen_share=True, file_upload=True),
        suggested_criteria=[
            CriterionSeed(
                name="Calculation Accuracy",
                description="Correctness of financial calculations",
            ),
            CriterionSeed(
                name="Excel Proficiency",
                description="Technical skill in spreadsheet modeling",
            ),
        ],
    ),
    TaskTemplate(
        id="accounting",
        name="Accounting Problem",
        description="Accounting principles and problem solving",
        default_prompt=(
            "Present an accounting scenario involving journal entries, financial statement "
            "preparation, or ratio analysis."
        ),
        default_behavior="neutral",
        default_duration=15,
        default_requirements=TaskRequirements(audio=True, screen_share=True),
        suggested_criteria=[
            CriterionSeed(
                name="Technical Accuracy",
                description="Correctness of accounting principles application",
            ),
        ],
    ),
    TaskTemplate(
        id="custom",
        name="Custom Task",
        description="Create a custom interview task",
        default_prompt="",
        default_behavior="neutral",
        default_duration=10,
        default_requirements=TaskRequirements(audio=True),
    ),
]

_BY_ID = {template.id: template for template in TASK_TEMPLATES}


def get_template(template_id: str) -> TaskTemplate:
    template = _BY_ID.get(template_id)
    if template is None:
        raise NotFoundError("Task template", template_id)
    return template
