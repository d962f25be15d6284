"""Core domain modules.

- types: wire snapshot, monitor state and display enums
- errors: request error taxonomy
- monitor: polling monitor, relay transport, derived display values, config
"""
