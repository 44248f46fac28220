import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.config import GREETING_MESSAGE
from ..models.conversation import ChatMessage, ConversationState, GatewayReply, GutCheckResult
from .copilot_service import process_command
from .session_service import ValuationSession

logger = logging.getLogger(__name__)

THINKING_MESSAGE = "Thinking..."


@dataclass(frozen=True)
class PendingRequest:
    """A question handed to the AI gateway, tagged with its send order."""
    sequence: int
    message: str
    context: Dict[str, Any]
    placeholder_id: str


class CopilotChat:
    """Conversation owner: message history, interview state and deferred AI requests.

    ``send`` runs the interpreter synchronously. When the interpreter defers,
    a "Thinking..." placeholder is appended and a ``PendingRequest`` returned;
    the caller asks the gateway and passes the reply to ``resolve``. Only the
    most recently sent request may fill its placeholder; replies to older
    requests are dropped.
    """

    def __init__(self, session: ValuationSession, gateway=None):
        self.session = session
        self.gateway = gateway
        self.state = ConversationState()
        self._ids = itertools.count(1)
        self._latest_sequence = 0
        self.messages: List[ChatMessage] = [self._message("assistant", GREETING_MESSAGE)]

    def _message(self, role, content, grounding_metadata=None):
        return ChatMessage(
            id=str(next(self._ids)),
            role=role,
            content=content,
            grounding_metadata=grounding_metadata
        )

    def send(self, text: str) -> Optional[PendingRequest]:
        if not text.strip():
            return None

        self.messages.append(self._message("user", text))
        result = process_command(text, self.session, self.state)
        self.state = result.next_state

        if not result.defer_to_external_ai:
            self.messages.append(self._message("assistant", result.text))
            return None

        placeholder = self._message("assistant", THINKING_MESSAGE)
        self.messages.append(placeholder)
        self._latest_sequence += 1
        return PendingRequest(
            sequence=self._latest_sequence,
            message=text,
            context=self.session.gateway_context(),
            placeholder_id=placeholder.id
        )

    def is_stale(self, request: PendingRequest) -> bool:
        return request.sequence != self._latest_sequence

    def resolve(self, request: PendingRequest, reply: GatewayReply) -> bool:
        """Fill the request's placeholder with the gateway reply; False if stale."""
        if self.is_stale(request):
            logger.info("Dropping stale AI reply for request %d (latest is %d)",
                        request.sequence, self._latest_sequence)
            self._remove_message(request.placeholder_id)
            return False

        for message in self.messages:
            if message.id == request.placeholder_id:
                message.content = reply.text
                message.grounding_metadata = reply.grounding_metadata
                return True

        self.messages.append(self._message("assistant", reply.text, reply.grounding_metadata))
        return True

    def _remove_message(self, message_id):
        self.messages = [m for m in self.messages if m.id != message_id]

    def ask(self, text: str) -> ChatMessage:
        """Send ``text`` and, if deferred, call the gateway inline. Returns the last message."""
        request = self.send(text)
        if request is not None:
            if self.gateway is None:
                raise RuntimeError("No AI gateway configured for deferred questions")
            reply = self.gateway.ask(request.message, request.context)
            self.resolve(request, reply)
        return self.messages[-1]

    def reset(self) -> None:
        self.state = ConversationState()
        # Requests still in flight belong to the old conversation
        self._latest_sequence += 1
        self.messages = [self._message("assistant", GREETING_MESSAGE)]


def run_gut_check(session: ValuationSession, gateway, narrative: str) -> GutCheckResult:
    """Ask the gateway to score a founder narrative and store the result on the session."""
    result = gateway.gut_check(narrative, session.context.to_dict())
    session.set_gut_check(result)
    logger.info("Gut check adjustment %+.0f (conviction %.0f)",
                result.suggested_adjustment, result.conviction_score)
    return result
