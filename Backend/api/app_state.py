from __future__ import annotations

from typing import Optional

from orchestration.orchestrator import AnalyzerOrchestrator

# Lightweight module to share the running orchestrator with route handlers.
# The app lifespan sets it during startup; routes read it at request time.

orchestrator: Optional[AnalyzerOrchestrator] = None
