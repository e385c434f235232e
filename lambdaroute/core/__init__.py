"""
Core blue/green logic: version resolution, task polling, output comparison,
retry and the orchestrator composing them.

Import from the subpackages directly, e.g.
``from lambdaroute.core.orchestrator import BlueGreenOrchestrator``.
"""
