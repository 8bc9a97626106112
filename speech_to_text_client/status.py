"""Status classification for the resources the client waits on.

A ``StatusCheck`` maps a fetched status record onto one of the closed
``StatusClass`` values and supplies the messages used when the poll ends
without success.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from speech_to_text_client.models import (
    Corpora,
    CorpusStatus,
    LanguageModel,
    LanguageModelStatus,
    StatusClass,
)

ResultT = TypeVar("ResultT")


class StatusCheck(ABC, Generic[ResultT]):
    pending_message: str = "Resource is still being processed, try increasing interval or times params"
    failed_message: str = "Resource reported a failed status"

    @abstractmethod
    def classify(self, result: ResultT) -> StatusClass:
        ...

    def describe_unexpected(self, result: ResultT) -> str:
        return f"Unexpected status: {result!r}"


class CorporaAnalysisCheck(StatusCheck[Corpora]):
    pending_message = "Corpora is still being processed, try increasing interval or times params"
    failed_message = "Corpora analysis failed"

    def classify(self, result: Corpora) -> StatusClass:
        statuses = {corpus.status for corpus in result.corpora}
        if CorpusStatus.being_processed.value in statuses:
            return StatusClass.processing
        if CorpusStatus.analyzed.value in statuses:
            return StatusClass.done
        return StatusClass.unexpected

    def describe_unexpected(self, result: Corpora) -> str:
        statuses = sorted({corpus.status for corpus in result.corpora})
        return f"Unexpected corpus analysis status: {', '.join(statuses) or 'none'}"


class CustomizationReadinessCheck(StatusCheck[LanguageModel]):
    pending_message = (
        "Customization is still pending, try increasing interval or times params"
    )
    failed_message = "Customization training failed"

    PROCESSING = frozenset(
        {LanguageModelStatus.pending.value, LanguageModelStatus.training.value}
    )
    DONE = frozenset(
        {LanguageModelStatus.ready.value, LanguageModelStatus.available.value}
    )

    def classify(self, result: LanguageModel) -> StatusClass:
        if result.status in self.PROCESSING:
            return StatusClass.processing
        if result.status in self.DONE:
            return StatusClass.done
        if result.status == LanguageModelStatus.failed.value:
            return StatusClass.failed
        return StatusClass.unexpected

    def describe_unexpected(self, result: LanguageModel) -> str:
        return f"Unexpected customization status: {result.status}"
