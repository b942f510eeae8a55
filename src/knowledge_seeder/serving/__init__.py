"""
Serving: the chat API over seeded records and a client for it.

``serving.app`` is a reference backend for the ``/chat`` wire contract;
``serving.client`` is the conversation-holding client that talks to any
backend implementing it.
"""
