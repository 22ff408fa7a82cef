from . import fields
from . import message
from . import wire

from .message import Message, MessageError


"""
elko Protocol Layer
===================

This package defines the transport-agnostic message vocabulary used by the
client: the envelope, the operation-specific variants the object model
understands, and the line-delimited JSON framing shared by every binding.

The protocol layer MUST NOT depend on any transport implementation
(e.g. httpx, websockets, ZeroMQ).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Session (session.py)
    Object and type tables, dispatch, choreographies
    - connect_to_context()
    - connect_to_context_via_director()

    │
    ▼
Message Model (message.py)
    Envelope and tagged variants
    - Message
    - Make, Delete, Exit, Debug, Ready, Reserve
    Validated before any handler runs

    │
    ▼
Framing (wire.py)
    Message <-> line-delimited JSON text

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names for references, operations, and connection tasks

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Connection Layer (connection.py)
    Sequencing, queueing, at most one transmission in flight

Transport Layer (transport/)
    Moves text
    - httpx long poll
    - requests long poll
    - WebSocket
    - ZeroMQ

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
