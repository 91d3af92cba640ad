"""
Pydantic Models for Interactive Video Data

These models describe the timestamped interactive elements a creator overlays
on a video, the viewer progress record persisted as suspend data, and the
request/response shapes used by the API layer. Presentation fields
(position, style, optionStyle, feedback) are carried as-is and never
interpreted by the scheduler.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ElementType(str, Enum):
    """Closed set of interactive element kinds"""
    QUIZ = "quiz"
    DECISION = "decision"
    HOTSPOT = "hotspot"
    POLL = "poll"


# Element kinds that cannot be resolved without picking one of their options
OPTION_TYPES = frozenset({ElementType.QUIZ, ElementType.DECISION, ElementType.POLL})


class InteractionResult(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NEUTRAL = "neutral"


class LessonStatus(str, Enum):
    """SCORM 1.2 cmi.core.lesson_status values produced by the engine"""
    NOT_ATTEMPTED = "not attempted"
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"


class ElementOption(BaseModel):
    """Selectable option of a quiz, decision or poll"""
    id: Optional[str] = Field(None, description="Option identifier")
    text: str = Field(..., description="Option label")
    isCorrect: Optional[bool] = Field(None, description="Whether this option is the right answer")
    action: Optional[str] = Field(None, description="Action to perform, e.g. 'jump:120'")


class Position(BaseModel):
    x: float = Field(50, description="Horizontal offset in percent")
    y: float = Field(50, description="Vertical offset in percent")


class InteractionStyle(BaseModel):
    backgroundColor: Optional[str] = None
    textColor: Optional[str] = None
    borderColor: Optional[str] = None
    borderRadius: Optional[str] = None
    fontSize: Optional[str] = None
    padding: Optional[str] = None
    opacity: Optional[str] = None


class InteractionOptionStyle(BaseModel):
    backgroundColor: Optional[str] = None
    textColor: Optional[str] = None
    borderColor: Optional[str] = None
    borderRadius: Optional[str] = None
    hoverColor: Optional[str] = None


class Feedback(BaseModel):
    """Post-answer feedback text"""
    correct: Optional[str] = None
    incorrect: Optional[str] = None

    def message_for(self, result: InteractionResult) -> Optional[str]:
        if result == InteractionResult.CORRECT:
            return self.correct or None
        if result == InteractionResult.INCORRECT:
            return self.incorrect or None
        return None


class InteractiveElement(BaseModel):
    """A timestamped interactive element overlaid on a video

    The element is active over the half-open window
    ``[timestamp, timestamp + duration)``.
    """
    id: str = Field(..., min_length=1, description="Unique element identifier")
    type: ElementType = Field(..., description="Element kind")
    title: str = Field(default="", max_length=200, description="Element title")
    description: Optional[str] = Field(None, description="Optional body text")
    timestamp: float = Field(..., ge=0, description="Start of the active window in seconds")
    duration: float = Field(..., gt=0, description="Length of the active window in seconds")
    options: List[ElementOption] = Field(default_factory=list, description="Ordered options")
    position: Optional[Position] = None
    style: Optional[InteractionStyle] = None
    optionStyle: Optional[InteractionOptionStyle] = None
    feedback: Optional[Feedback] = None
    pauseVideo: Optional[bool] = Field(
        None, description="Pause playback on entry; falls back to the video settings when unset"
    )

    @model_validator(mode="after")
    def validate_options_for_type(self):
        if self.type in OPTION_TYPES and not self.options:
            raise ValueError(f"{self.type.value} elements must have at least one option")
        return self

    @property
    def end(self) -> float:
        return self.timestamp + self.duration

    def is_active_at(self, current_time: float) -> bool:
        return self.timestamp <= current_time < self.end

    @property
    def requires_option(self) -> bool:
        return self.type in OPTION_TYPES

    def correct_option_index(self) -> Optional[int]:
        for index, option in enumerate(self.options):
            if option.isCorrect:
                return index
        return None


class InteractionSettings(BaseModel):
    """Per-video playback behaviour for interactions"""
    pauseOnInteraction: bool = Field(default=True, description="Pause when an element appears")
    showFeedback: bool = Field(default=True, description="Show feedback after an answer")
    autoAdvance: bool = Field(default=False, description="Resume without waiting for feedback dismissal")
    allowSkipping: bool = Field(default=True, description="Viewers may skip an element")
    preventSkipping: bool = Field(
        default=False, description="Clamp forward seeks to the first unresolved element"
    )
    defaultStyle: Optional[InteractionStyle] = None
    defaultOptionStyle: Optional[InteractionOptionStyle] = None


class ViewerProgress(BaseModel):
    """The suspend-data record: last position plus resolved element ids"""
    currentTime: float = Field(default=0, ge=0, description="Last known playback position")
    completedInteractionIds: List[str] = Field(
        default_factory=list, description="Resolved element ids, each at most once"
    )

    @field_validator("completedInteractionIds")
    def dedupe_ids(cls, ids: List[str]):
        seen = set()
        unique = []
        for element_id in ids:
            if element_id not in seen:
                seen.add(element_id)
                unique.append(element_id)
        return unique


class InteractionResponse(BaseModel):
    """Outcome of resolving one element"""
    elementId: str
    optionIndex: Optional[int] = None
    value: Optional[str] = Field(None, description="Free-form response, e.g. a hotspot click")
    result: InteractionResult
    scoreDelta: int = 0


class InteractionLogRecord(BaseModel):
    """One entry of the interaction log, written positionally to cmi.interactions.N"""
    id: str
    type: str
    result: str
    studentResponse: str = ""
    correctResponse: str = ""


class ElementListSnapshot(BaseModel):
    """Complete element list plus presentation defaults, handed to encoders"""
    videoId: Optional[str] = None
    title: Optional[str] = None
    elements: List[InteractiveElement] = Field(default_factory=list)
    settings: InteractionSettings = Field(default_factory=InteractionSettings)
    version: str = Field(default="1.0")


class StyleTemplate(BaseModel):
    """Visual template applied to an element by the editor"""
    id: str
    name: str
    description: str = ""
    style: InteractionStyle = Field(default_factory=InteractionStyle)
    optionStyle: InteractionOptionStyle = Field(default_factory=InteractionOptionStyle)
    position: Optional[Position] = None


# API Request/Response Models
class ElementCreate(BaseModel):
    """Request model for adding an element at the playhead"""
    type: ElementType
    timestamp: float = Field(default=0, ge=0, description="Playhead position in seconds")


class ElementImportRequest(BaseModel):
    format: str = Field(default="json", description="Payload format: json or csv")
    payload: str = Field(..., description="Encoded element list")


class PreviewRequest(BaseModel):
    currentTime: float = Field(..., ge=0)
    completedIds: List[str] = Field(default_factory=list)
    activeIds: List[str] = Field(default_factory=list)


class PreviewResponse(BaseModel):
    active: List[str]
    entered: List[str]
    exited: List[str]
    pauseRequested: bool


class ProgressDocument(BaseModel):
    """Suspend-data document exchanged with the progress endpoints"""
    suspendData: str = Field(default="", description="Opaque serialized ViewerProgress")
    lessonStatus: LessonStatus = Field(default=LessonStatus.NOT_ATTEMPTED)
    scoreRaw: int = Field(default=0, ge=0, le=100)


class RespondRequest(BaseModel):
    elementId: str
    optionIndex: Optional[int] = None
    value: Optional[str] = None
    currentTime: Optional[float] = Field(None, ge=0)


class RespondResponse(BaseModel):
    response: InteractionResponse
    log: InteractionLogRecord
    action: Optional[str] = None
    feedback: Optional[str] = None
    score: int
    lessonStatus: LessonStatus


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Current environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    uptime: Optional[float] = Field(None, description="Uptime in seconds")
