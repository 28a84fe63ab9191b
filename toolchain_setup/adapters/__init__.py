"""
Adapters — the collaborators the core talks to.

    installer/  — puts toolchains on disk (command, mock)
    cache/      — remote cache service (local directory backend)
    actions/    — CI runtime files (outputs, environment, state)
"""
