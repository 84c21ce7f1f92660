"""Hook implementations and the dispatcher that routes to them.

Each hook module exposes a ``SPEC`` (:class:`~devflow_hooks.hooks.models.HookSpec`)
naming its phase, the tools it handles, its log file and its handler.
Hooks run in a fresh process per tool call, so nothing here may hold
state between invocations.
"""
