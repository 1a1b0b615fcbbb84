"""
Assistant Interaction Logger

Writes every conversational-assistant call (request turns, reply or failure,
model, latency) as one JSON file per interaction, in agent-specific folders,
for diagnosing failed or blocked generations.
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


class AssistantInteractionLogger:
    """Centralized file logger for assistant interactions"""

    def __init__(self, base_dir: str, enabled: bool = True):
        self.base_dir = Path(base_dir)
        self.enabled = enabled

    def _get_agent_dir(self, agent_name: str) -> Path:
        agent_dir = self.base_dir / agent_name.lower().replace(" ", "_")
        agent_dir.mkdir(parents=True, exist_ok=True)
        return agent_dir

    def _generate_interaction_id(self, conversation_id: Optional[int] = None) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        if conversation_id:
            return f"c{conversation_id}_{timestamp}_{unique_id}"
        return f"{timestamp}_{unique_id}"

    def log_interaction(
        self,
        agent_name: str,
        operation: str,
        request_data: List[Dict[str, Any]],
        response_text: Optional[str] = None,
        error: Optional[str] = None,
        conversation_id: Optional[int] = None,
        model_name: Optional[str] = None,
        latency_ms: Optional[int] = None,
        additional_metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Persist one interaction; returns its id, or None when disabled or the write failed."""
        if not self.enabled:
            return None

        interaction_id = self._generate_interaction_id(conversation_id)
        record = {
            "metadata": {
                "interaction_id": interaction_id,
                "agent_name": agent_name,
                "operation": operation,
                "timestamp": datetime.now().isoformat(),
                "conversation_id": conversation_id,
                "model_name": model_name or "unknown",
                "latency_ms": latency_ms,
                "status": "error" if error else "ok",
                "additional_metadata": additional_metadata or {},
            },
            "request": {"messages": request_data},
            "response": {"content": response_text, "error": error},
        }

        try:
            path = self._get_agent_dir(agent_name) / f"{operation}_{interaction_id}.json"
            with open(path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False, default=str)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to log assistant interaction {interaction_id}: {e}")
            return None

        logger.debug(f"Saved assistant interaction: {agent_name}/{interaction_id}")
        return interaction_id


# Global logger instance
_assistant_logger: Optional[AssistantInteractionLogger] = None


def get_assistant_logger() -> AssistantInteractionLogger:
    """Get or create the global assistant interaction logger"""
    global _assistant_logger
    if _assistant_logger is None:
        _assistant_logger = AssistantInteractionLogger(
            settings.ASSISTANT_LOG_DIR, enabled=settings.ASSISTANT_LOG_ENABLED
        )
    return _assistant_logger
