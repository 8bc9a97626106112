from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INTERVAL = 5000
DEFAULT_TIMES = 30


class ErrorKind(str, Enum):
    no_work_item = "no_work_item"
    timeout = "timeout"
    terminal_failure = "terminal_failure"
    unexpected_status = "unexpected_status"
    transport = "transport"
    invalid_argument = "invalid_argument"


class StatusClass(str, Enum):
    processing = "processing"
    done = "done"
    failed = "failed"
    unexpected = "unexpected"


class CorpusStatus(str, Enum):
    analyzed = "analyzed"
    being_processed = "being_processed"
    undetermined = "undetermined"


class LanguageModelStatus(str, Enum):
    pending = "pending"
    ready = "ready"
    training = "training"
    available = "available"
    upgrading = "upgrading"
    failed = "failed"


class PollConfig(BaseModel):
    """How often and how many times a status check is repeated.

    ``interval`` is in milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    interval: int = Field(DEFAULT_INTERVAL, gt=0)
    times: int = Field(DEFAULT_TIMES, gt=0)

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000


class Corpus(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    status: str
    total_words: int = 0
    out_of_vocabulary_words: int = 0
    error: Optional[str] = None


class Corpora(BaseModel):
    model_config = ConfigDict(extra="allow")

    corpora: List[Corpus] = Field(default_factory=list)


class LanguageModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    customization_id: str
    status: str
    name: Optional[str] = None
    language: Optional[str] = None
    base_model_name: Optional[str] = None
    progress: int = 0
    error: Optional[str] = None
    warnings: Optional[str] = None


class DetailedResponse(BaseModel):
    result: Any
    status: int
    headers: dict = Field(default_factory=dict)
