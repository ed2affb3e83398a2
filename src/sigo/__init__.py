"""sigo: command-line gateway to text-generation providers.

Layout:
- core/: shared types (turns, call results, outcomes) and the cancel token
- config/: provider config models and the `.<model>.config` resolver
- llm/: provider adapters, HTTP transport and the single-call client
- engine/: circuit breaker and retry controller
- data/: sessions, context building and file persistence
- gateway.py: the orchestrator tying them together
- cli/: the `sigo` command
"""

__version__ = "0.1.0"
