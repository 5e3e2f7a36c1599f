import asyncio
import logging
from contextlib import contextmanager
from typing import List, Optional, Sequence, Set

from thesislens.config import Settings, get_settings
from thesislens.exceptions import FeatureBusyError, PipelineStateError, WorkspaceValidationError
from thesislens.schemas.llm import LLMResult
from thesislens.schemas.workspace import (
    ChatMessage,
    PipelineProgress,
    PipelineState,
    WorkspaceSnapshot,
)
from thesislens.services.llm.client import LLMGateway
from thesislens.services.pipeline import ClassificationPipeline, PipelineRun, SelectedFile
from thesislens.services.reports import ReportService
from thesislens.services.workspace.store import LibraryStore

logger = logging.getLogger(__name__)

PIPELINE = "pipeline"
SYNTHESIS = "synthesis"
COMPARATIVE = "comparative"
CHAT = "chat"


def intro_message(article_count: int) -> ChatMessage:
    return ChatMessage(
        role="ai",
        text=(
            f"I have analyzed {article_count} papers using their full text. "
            "Ask me anything about them, and I'll cite my sources."
        ),
    )


class WorkspaceController:
    """Owns all workspace state and serializes work per feature.

    Only one request per feature (pipeline, synthesis, comparative, chat) may
    be in flight; a second one is rejected with FeatureBusyError.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        settings: Optional[Settings] = None,
        pipeline: Optional[ClassificationPipeline] = None,
    ):
        self.settings = settings or get_settings()
        self.gateway = gateway
        self.pipeline = pipeline or ClassificationPipeline(
            gateway, delay_seconds=self.settings.inter_document_delay_seconds
        )
        self.reports = ReportService(gateway)
        self.store = LibraryStore()

        self.state = PipelineState.SETUP
        self.progress = PipelineProgress()
        self.user_guide = self.settings.default_user_guide
        self.taxonomy_mode = self.settings.default_taxonomy_mode
        self.chat_messages: List[ChatMessage] = []
        self.comp_report: Optional[str] = None
        self.synth_report: Optional[str] = None
        self.last_run: Optional[PipelineRun] = None

        self._busy: Set[str] = set()
        self._pipeline_task: Optional[asyncio.Task] = None

    # ---- busy flags ----

    def is_busy(self, feature: str) -> bool:
        return feature in self._busy

    @property
    def busy_features(self) -> List[str]:
        return sorted(self._busy)

    @contextmanager
    def _busy_flag(self, feature: str):
        if feature in self._busy:
            raise FeatureBusyError(feature)
        self._busy.add(feature)
        try:
            yield
        finally:
            self._busy.discard(feature)

    def _require_ready(self) -> None:
        if self.state != PipelineState.READY:
            raise PipelineStateError(f"Workspace is '{self.state.value}'; analyze or load documents first")

    # ---- setup / pipeline ----

    def configure(self, user_guide: Optional[str] = None, taxonomy_mode: Optional[str] = None) -> None:
        if self.state == PipelineState.PROCESSING:
            raise FeatureBusyError(PIPELINE)
        if user_guide is not None:
            self.user_guide = user_guide
        if taxonomy_mode is not None:
            self.taxonomy_mode = taxonomy_mode

    def _set_progress(self, progress: PipelineProgress) -> None:
        self.progress = progress

    async def start_processing(
        self,
        files: Sequence[SelectedFile],
        user_guide: Optional[str] = None,
        taxonomy_mode: Optional[str] = None,
    ) -> asyncio.Task:
        """Kick off a classification run in the background.

        Returns:
            The task running the pipeline; it resolves to the PipelineRun
        """
        if self.is_busy(PIPELINE):
            raise FeatureBusyError(PIPELINE)
        if self.state != PipelineState.SETUP:
            raise PipelineStateError("Reset the workspace before analyzing a new batch")
        if not files:
            raise WorkspaceValidationError("Select at least one file to analyze")

        self.configure(user_guide, taxonomy_mode)
        self._busy.add(PIPELINE)
        self.state = PipelineState.PROCESSING
        self.progress = PipelineProgress(current=0, total=len(files), status="Reading files...")
        logger.info(f"Starting analysis of {len(files)} files (mode={self.taxonomy_mode})")

        self._pipeline_task = asyncio.create_task(self._run_pipeline(list(files)))
        self._pipeline_task.add_done_callback(self._collect_pipeline_result)
        return self._pipeline_task

    @staticmethod
    def _collect_pipeline_result(task: asyncio.Task) -> None:
        # _run_pipeline already logged the crash; retrieve it so asyncio does not warn again
        if not task.cancelled():
            task.exception()

    async def _run_pipeline(self, files: List[SelectedFile]) -> PipelineRun:
        try:
            run = await self.pipeline.run(files, self.user_guide, self.taxonomy_mode, on_progress=self._set_progress)
            self.store.replace(run.articles, run.taxonomy)
            self.chat_messages = [intro_message(len(run.articles))]
            self.comp_report = None
            self.synth_report = None
            self.last_run = run
            self.state = PipelineState.READY
            self.progress = PipelineProgress(current=len(files), total=len(files), status="Complete")
            return run
        except Exception:
            logger.exception("Classification pipeline crashed")
            self.state = PipelineState.SETUP
            self.progress = PipelineProgress(current=0, total=len(files), status="Failed")
            raise
        finally:
            self._busy.discard(PIPELINE)

    def reset(self) -> None:
        if self.state == PipelineState.PROCESSING:
            raise PipelineStateError("Cannot reset while documents are being analyzed")
        self.store.clear()
        self.chat_messages = []
        self.comp_report = None
        self.synth_report = None
        self.last_run = None
        self.progress = PipelineProgress()
        self.state = PipelineState.SETUP
        logger.info("Workspace reset")

    # ---- reports / chat ----

    async def generate_synthesis(self, tag: Optional[str] = None) -> LLMResult[str]:
        self._require_ready()
        with self._busy_flag(SYNTHESIS):
            result = await self.reports.generate_synthesis(self.store.articles, tag)
            self.synth_report = result.value
        return result

    async def generate_comparative(self) -> LLMResult[str]:
        self._require_ready()
        with self._busy_flag(COMPARATIVE):
            result = await self.reports.generate_comparative(self.user_guide, self.store.articles)
            self.comp_report = result.value
        return result

    async def send_chat(self, question: str) -> LLMResult[ChatMessage]:
        self._require_ready()
        question = question.strip()
        if not question:
            raise WorkspaceValidationError("Question must not be empty")
        with self._busy_flag(CHAT):
            history = list(self.chat_messages)
            self.chat_messages.append(ChatMessage(role="user", text=question))
            result = await self.reports.chat(history, question, self.store.articles)
            reply = ChatMessage(role="ai", text=result.value)
            self.chat_messages.append(reply)
        return LLMResult[ChatMessage](value=reply, error=result.error)

    # ---- persistence ----

    def snapshot(self) -> WorkspaceSnapshot:
        return WorkspaceSnapshot(
            articles=list(self.store.articles),
            taxonomy=list(self.store.taxonomy),
            user_guide=self.user_guide,
            chat_messages=list(self.chat_messages),
            comp_report=self.comp_report,
            synth_report=self.synth_report,
            taxonomy_mode=self.taxonomy_mode,
        )

    def load_snapshot(self, snapshot: WorkspaceSnapshot) -> None:
        if self.state == PipelineState.PROCESSING:
            raise FeatureBusyError(PIPELINE)
        self.store.replace(snapshot.articles, snapshot.taxonomy)
        self.user_guide = snapshot.user_guide
        self.chat_messages = list(snapshot.chat_messages)
        self.comp_report = snapshot.comp_report
        self.synth_report = snapshot.synth_report
        self.taxonomy_mode = snapshot.taxonomy_mode
        self.last_run = None
        self.progress = PipelineProgress(current=len(snapshot.articles), total=len(snapshot.articles), status="Loaded")
        self.state = PipelineState.READY
