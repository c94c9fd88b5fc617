"""Conversation feature package: entities, repository, service, controller, router.

Persistent multi-turn conversations: rolling message history, a bounded
context window for the model, and atomic user/assistant message pairs.
"""
