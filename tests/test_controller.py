"""Tests for the workspace controller: state machine, busy flags, reports, chat."""

import asyncio
import gc
import threading

import pytest

from thesislens.exceptions import FeatureBusyError, PipelineStateError, WorkspaceValidationError
from thesislens.schemas.workspace import PipelineState

from tests.conftest import FakeGateway


async def _analyze(controller, files, **kwargs):
    task = await controller.start_processing(files, **kwargs)
    return await task


class TestPipelineStateMachine:
    @pytest.mark.asyncio
    async def test_setup_to_ready(self, controller, three_files):
        assert controller.state == PipelineState.SETUP

        task = await controller.start_processing(three_files, user_guide="Shrubs help", taxonomy_mode="standard")
        assert controller.state == PipelineState.PROCESSING
        assert controller.is_busy("pipeline")

        await task

        assert controller.state == PipelineState.READY
        assert not controller.is_busy("pipeline")
        assert len(controller.store) == 3
        assert controller.user_guide == "Shrubs help"
        assert controller.progress.status == "Complete"
        assert len(controller.chat_messages) == 1
        assert controller.chat_messages[0].role == "ai"
        assert controller.chat_messages[0].text.startswith("I have analyzed 3 papers")

    @pytest.mark.asyncio
    async def test_zero_files_rejected(self, controller):
        with pytest.raises(WorkspaceValidationError):
            await controller.start_processing([])
        assert controller.state == PipelineState.SETUP

    @pytest.mark.asyncio
    async def test_second_start_while_processing_rejected(self, controller, three_files):
        task = await controller.start_processing(three_files)
        with pytest.raises(FeatureBusyError):
            await controller.start_processing(three_files)
        await task

    @pytest.mark.asyncio
    async def test_start_after_ready_requires_reset(self, controller, three_files):
        await _analyze(controller, three_files)
        with pytest.raises(PipelineStateError):
            await controller.start_processing(three_files)

        controller.reset()
        assert controller.state == PipelineState.SETUP
        assert len(controller.store) == 0
        await _analyze(controller, three_files[:1])
        assert len(controller.store) == 1

    @pytest.mark.asyncio
    async def test_taxonomy_stored(self, controller, gateway, three_files):
        await _analyze(controller, three_files)
        assert controller.store.taxonomy == gateway.taxonomy + ["Unsorted"]


class TestReports:
    @pytest.mark.asyncio
    async def test_reports_require_ready(self, controller):
        with pytest.raises(PipelineStateError):
            await controller.generate_synthesis()

    @pytest.mark.asyncio
    async def test_synthesis_and_comparative_are_stored(self, controller, gateway, three_files):
        await _analyze(controller, three_files, user_guide="Shrubs help")

        synthesis = await controller.generate_synthesis("Facilitation")
        comparative = await controller.generate_comparative()

        assert synthesis.value == "Synthesis over 3 papers"
        assert controller.synth_report == synthesis.value
        assert controller.comp_report == "Comparative report"
        assert ("comparative", "Shrubs help", 3) in gateway.events
        assert ("synthesis", "Facilitation", 3) in gateway.events


class TestChat:
    @pytest.mark.asyncio
    async def test_chat_appends_both_turns(self, controller, gateway, three_files):
        await _analyze(controller, three_files)

        result = await controller.send_chat("  Which paper supports facilitation?  ")

        assert result.value.text == "Answer to: Which paper supports facilitation?"
        assert [m.role for m in controller.chat_messages] == ["ai", "user", "ai"]
        # history sent to the model is the conversation before the new question
        assert [m.role for m in gateway.chat_histories[0]] == ["ai"]

    @pytest.mark.asyncio
    async def test_blank_question_rejected(self, controller, three_files):
        await _analyze(controller, three_files)
        with pytest.raises(WorkspaceValidationError):
            await controller.send_chat("   ")

    @pytest.mark.asyncio
    async def test_one_chat_in_flight(self, controller, gateway, three_files):
        await _analyze(controller, three_files)
        gateway.chat_gate = threading.Event()

        first = asyncio.create_task(controller.send_chat("first"))
        for _ in range(100):
            if controller.is_busy("chat"):
                break
            await asyncio.sleep(0.01)

        with pytest.raises(FeatureBusyError):
            await controller.send_chat("second")

        gateway.chat_gate.set()
        await first
        assert not controller.is_busy("chat")
        assert [m.text for m in controller.chat_messages if m.role == "user"] == ["first"]


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_reload_into_fresh_controller(self, controller, gateway, settings, three_files):
        from thesislens.services.workspace.controller import WorkspaceController

        await _analyze(controller, three_files)
        await controller.generate_synthesis()
        controller.store.add_quote(controller.store.articles[0].id, "Manual quote")

        snapshot = controller.snapshot()
        other = WorkspaceController(gateway, settings=settings)
        other.load_snapshot(snapshot)

        assert other.state == PipelineState.READY
        assert other.store.articles == controller.store.articles
        assert other.store.taxonomy == controller.store.taxonomy
        assert other.synth_report == controller.synth_report
        assert other.comp_report is None


class ExplodingGateway(FakeGateway):
    def generate_taxonomy(self, titles, user_guide, mode):
        raise RuntimeError("taxonomy service down")


class TestPipelineCrash:
    @pytest.mark.asyncio
    async def test_crashed_run_returns_to_setup_without_unretrieved_error(self, settings, three_files):
        from thesislens.services.workspace.controller import WorkspaceController

        gateway = ExplodingGateway()
        controller = WorkspaceController(gateway, settings=settings)
        loop = asyncio.get_running_loop()
        unhandled = []
        loop.set_exception_handler(lambda _loop, context: unhandled.append(context))
        try:
            task = await controller.start_processing(three_files)
            await asyncio.wait([task])
            await asyncio.sleep(0)

            assert controller.state == PipelineState.SETUP
            assert controller.progress.status == "Failed"
            assert not controller.is_busy("pipeline")

            controller._pipeline_task = None
            del task
            gc.collect()
            assert unhandled == []
        finally:
            loop.set_exception_handler(None)
