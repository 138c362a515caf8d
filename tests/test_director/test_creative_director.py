"""
Tests for the Creative Director

Tests for remixstudio/director/creative_director.py
"""

import logging

import pytest

from remixstudio.core.config import PipelineConfig
from remixstudio.core.exceptions import MalformedResponseError, PlannerFailure
from remixstudio.director.creative_director import (
    PLAN_SCHEMA,
    CreativeDirector,
    OrchestrationPlan,
    OrchestrationTask,
    parse_plan,
)
from remixstudio.director.prompts import StudioPromptLibrary
from remixstudio.llm.media import InlineMedia


class TestParsePlan:
    """Tests for parse_plan."""

    def test_parses_tasks(self):
        plan = parse_plan({"tasks": [
            {"id": "a", "type": "socialMediaTemplate", "description": "Bold", "prompt": "Do it", "dependencies": ["b"]},
        ]})

        assert plan.tasks == [OrchestrationTask("a", "socialMediaTemplate", "Bold", "Do it", ["b"])]

    def test_missing_tasks_array(self):
        with pytest.raises(PlannerFailure):
            parse_plan({"plan": []})
        with pytest.raises(PlannerFailure):
            parse_plan(["not", "an", "object"])

    def test_skips_entries_without_prompt(self):
        plan = parse_plan({"tasks": [
            "junk",
            {"id": "a", "type": "socialMediaTemplate", "prompt": "  "},
            {"type": "socialMediaTemplate", "prompt": "Keep me"},
        ]})

        assert [task.prompt for task in plan.tasks] == ["Keep me"]
        assert plan.tasks[0].id == "task-3"

    def test_to_dict(self):
        plan = OrchestrationPlan([OrchestrationTask("a", "t", "d", "p")])

        assert plan.to_dict() == {"tasks": [
            {"id": "a", "type": "t", "description": "d", "prompt": "p", "dependencies": []},
        ]}


class TestCreativeDirector:
    """Tests for CreativeDirector."""

    def test_build_prompt_mentions_goal_and_count(self, fake_service):
        prompt = CreativeDirector(fake_service).build_prompt("Summer sale", "- Board ...", "- Brand ...")

        assert '"Summer sale"' in prompt
        assert "FOUR" in prompt
        assert "'socialMediaTemplate'" in prompt
        assert StudioPromptLibrary.DESIGNER_SYSTEM_INSTRUCTION in prompt

    def test_build_prompt_placeholder_when_no_boards(self, fake_service):
        prompt = CreativeDirector(fake_service).build_prompt("Goal", "", "")

        assert "No content boards provided." in prompt

    @pytest.mark.asyncio
    async def test_plan_sends_prompt_logo_then_images(self, fake_service, png_src):
        image = InlineMedia.from_data_url(png_src)
        logo = InlineMedia(data="bG9nbw==", mime_type="image/png")

        plan = await CreativeDirector(fake_service).plan("Goal", "boards", "brand", [image, image], logo)

        assert len(plan.tasks) == 4
        _, parts, schema = fake_service.calls_of("structured")[0]
        assert schema is PLAN_SCHEMA
        assert isinstance(parts[0], str)
        assert parts[1] is logo
        assert parts[2:] == [image, image]

    @pytest.mark.asyncio
    async def test_malformed_response_becomes_planner_failure(self, fake_service):
        fake_service.structured_responses.append(MalformedResponseError("not json"))

        with pytest.raises(PlannerFailure):
            await CreativeDirector(fake_service).plan("Goal", "boards", "")

    @pytest.mark.asyncio
    async def test_zero_tasks_of_expected_type(self, fake_service):
        fake_service.plan_tasks = [{"type": "headline", "prompt": "Write a headline"}]

        with pytest.raises(PlannerFailure):
            await CreativeDirector(fake_service).plan("Goal", "boards", "")

    @pytest.mark.asyncio
    async def test_empty_plan(self, fake_service):
        fake_service.plan_tasks = []

        with pytest.raises(PlannerFailure):
            await CreativeDirector(fake_service).plan("Goal", "boards", "")

    def test_select_tasks_filters_type_and_warns_on_count(self, fake_service, caplog):
        plan = parse_plan({"tasks": [
            {"type": "socialMediaTemplate", "prompt": "one"},
            {"type": "headline", "prompt": "two"},
            {"type": "socialMediaTemplate", "prompt": "three"},
        ]})

        with caplog.at_level(logging.WARNING, logger="remixstudio"):
            tasks = CreativeDirector(fake_service).select_tasks(plan)

        assert [task.prompt for task in tasks] == ["one", "three"]
        assert "Expected 4" in caplog.text

    def test_custom_task_type(self, fake_service):
        director = CreativeDirector(fake_service, PipelineConfig(task_type="banner", expected_task_count=1))
        plan = parse_plan({"tasks": [{"type": "banner", "prompt": "wide"}]})

        assert len(director.select_tasks(plan)) == 1
        assert "ONE" in director.build_prompt("g", "b", "")
