"""
Remix Studio Creative Director

Planning phase of a remix: one structured round-trip to the model that turns
the user's goal and the summarized assets into an OrchestrationPlan of
self-contained natural-language briefs.

Task ``dependencies`` are carried through as reserved metadata. The executor
fans every task out concurrently and never schedules by them.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from remixstudio.core.cancellation import CancellationToken
from remixstudio.core.config import PipelineConfig, get_config
from remixstudio.core.exceptions import MalformedResponseError, PlannerFailure
from remixstudio.core.logging_config import get_logger
from remixstudio.director.prompts import StudioPromptLibrary
from remixstudio.llm.media import InlineMedia
from remixstudio.llm.service import GenerativeModelService, Part

logger = get_logger("director.creative")


PLAN_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "tasks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "type": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "prompt": {"type": "STRING"},
                    "dependencies": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["id", "type", "description", "prompt", "dependencies"],
            },
        },
    },
    "required": ["tasks"],
}

_COUNT_WORDS = {1: "ONE", 2: "TWO", 3: "THREE", 4: "FOUR", 5: "FIVE", 6: "SIX"}


@dataclass
class OrchestrationTask:
    """One natural-language brief for one generated output."""
    id: str
    type: str
    description: str
    prompt: str
    # Reserved: not used for scheduling
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.type,
            'description': self.description,
            'prompt': self.prompt,
            'dependencies': list(self.dependencies),
        }


@dataclass
class OrchestrationPlan:
    """Structured output of the planning phase."""
    tasks: List[OrchestrationTask] = field(default_factory=list)

    def tasks_of_type(self, task_type: str) -> List[OrchestrationTask]:
        return [task for task in self.tasks if task.type == task_type]

    def to_dict(self) -> dict:
        return {'tasks': [task.to_dict() for task in self.tasks]}


def parse_plan(payload: Any) -> OrchestrationPlan:
    """
    Build a plan from the model's JSON.

    Raises:
        PlannerFailure: If the payload has no ``tasks`` array
    """
    if not isinstance(payload, dict) or not isinstance(payload.get('tasks'), list):
        raise PlannerFailure("Planner response has no 'tasks' array", {"payload_type": type(payload).__name__})

    tasks = []
    for index, raw in enumerate(payload['tasks']):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object plan entry at index {index}")
            continue
        prompt = raw.get('prompt')
        if not isinstance(prompt, str) or not prompt.strip():
            logger.warning(f"Skipping plan entry {index} without a prompt")
            continue
        dependencies = raw.get('dependencies') or []
        tasks.append(OrchestrationTask(
            id=str(raw.get('id') or f"task-{index + 1}"),
            type=str(raw.get('type', "")),
            description=str(raw.get('description', "")),
            prompt=prompt,
            dependencies=[str(dep) for dep in dependencies if isinstance(dep, (str, int))],
        ))
    return OrchestrationPlan(tasks=tasks)


class CreativeDirector:
    """
    Plans a remix.

    Usage:
        director = CreativeDirector(service)
        plan = await director.plan(goal, summary.boards_text, summary.brand_text, images)
        tasks = director.select_tasks(plan)
    """

    def __init__(self, service: GenerativeModelService, config: Optional[PipelineConfig] = None):
        self.service = service
        self.config = config or get_config().pipeline

    def build_prompt(self, goal: str, boards_text: str, brand_text: str) -> str:
        count = self.config.expected_task_count
        directions = ", ".join(f"'{d}'" for d in StudioPromptLibrary.CREATIVE_DIRECTIONS)
        return StudioPromptLibrary.render(
            StudioPromptLibrary.CREATIVE_DIRECTOR,
            goal=goal,
            boards_text=boards_text or "No content boards provided.",
            brand_text=brand_text or "",
            count=count,
            count_word=_COUNT_WORDS.get(count, str(count)),
            task_type=self.config.task_type,
            system_instruction=StudioPromptLibrary.DESIGNER_SYSTEM_INSTRUCTION,
            directions=directions,
        )

    async def plan(
        self,
        goal: str,
        boards_text: str,
        brand_text: str,
        image_assets: Sequence[InlineMedia] = (),
        brand_logo: Optional[InlineMedia] = None,
        token: Optional[CancellationToken] = None,
    ) -> OrchestrationPlan:
        """
        Request a plan from the model.

        Raises:
            PlannerFailure: Empty or malformed response, or no task of the expected type
        """
        parts: List[Part] = [self.build_prompt(goal, boards_text, brand_text)]
        if brand_logo is not None:
            parts.append(brand_logo)
        parts.extend(image_assets)

        logger.info(f"Planning remix with {len(image_assets)} image asset(s)")
        try:
            payload = await self.service.generate_structured(parts, PLAN_SCHEMA, token=token)
        except MalformedResponseError as e:
            logger.error(f"Planner returned an unusable response: {e}")
            raise PlannerFailure(f"Planner response unusable: {e.message}", e.details)

        plan = parse_plan(payload)
        self.select_tasks(plan)
        logger.info(f"Plan ready: {len(plan.tasks)} task(s)")
        return plan

    def select_tasks(self, plan: OrchestrationPlan) -> List[OrchestrationTask]:
        """Tasks of the configured type; other types are ignored."""
        tasks = plan.tasks_of_type(self.config.task_type)
        if not tasks:
            logger.error(f"Plan contains no '{self.config.task_type}' tasks")
            raise PlannerFailure(
                f"Plan contains no '{self.config.task_type}' tasks",
                {"task_types": sorted({task.type for task in plan.tasks})},
            )
        if len(tasks) != self.config.expected_task_count:
            logger.warning(
                f"Expected {self.config.expected_task_count} '{self.config.task_type}' tasks, got {len(tasks)}"
            )
        return tasks
