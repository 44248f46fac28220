from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Tuple, Union

from ..core.config import ConversationStep


@dataclass(frozen=True)
class ConversationState:
    """Where the guided interview currently stands. Never persisted."""
    step: ConversationStep = ConversationStep.IDLE

    @property
    def is_idle(self) -> bool:
        return self.step == ConversationStep.IDLE


IDLE = ConversationState(ConversationStep.IDLE)


@dataclass(frozen=True)
class Handled:
    """The interpreter answered locally; ``text`` is the reply to show."""
    text: str
    next_state: ConversationState

    defer_to_external_ai = False


@dataclass(frozen=True)
class Deferred:
    """No local command matched; the caller should ask the AI gateway."""
    next_state: ConversationState = IDLE

    text = ""
    defer_to_external_ai = True


CommandResult = Union[Handled, Deferred]


def grounding_sources(grounding_metadata: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """(uri, title) pairs for every web citation in a grounding payload.

    Chunks without a web entry or uri are skipped; a missing title reads "Source".
    """
    if not grounding_metadata:
        return []
    pairs = []
    for chunk in grounding_metadata.get("groundingChunks") or []:
        web = chunk.get("web") or {}
        if web.get("uri"):
            pairs.append((web["uri"], web.get("title") or "Source"))
    return pairs


@dataclass
class ChatMessage:
    id: str
    role: str
    content: str
    grounding_metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "role": self.role,
            "content": self.content
        }
        if self.grounding_metadata is not None:
            data["groundingMetadata"] = self.grounding_metadata
        return data

    def sources(self) -> List[Tuple[str, str]]:
        return grounding_sources(self.grounding_metadata)


@dataclass(frozen=True)
class GatewayReply:
    """Text returned by the AI gateway plus optional citation payload."""
    text: str
    grounding_metadata: Optional[Dict[str, Any]] = None

    def sources(self) -> List[Tuple[str, str]]:
        return grounding_sources(self.grounding_metadata)


@dataclass(frozen=True)
class GutCheckResult:
    conviction_score: float
    suggested_adjustment: float
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "convictionScore": self.conviction_score,
            "suggestedAdjustment": self.suggested_adjustment,
            "reasoning": self.reasoning
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GutCheckResult':
        return cls(
            conviction_score=float(data["convictionScore"]),
            suggested_adjustment=float(data["suggestedAdjustment"]),
            reasoning=str(data["reasoning"])
        )
