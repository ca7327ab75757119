"""Negotiation states for the paying client."""

from enum import Enum


class NegotiationState(str, Enum):
    """Client-side negotiation states, logged on each transition"""
    INIT = "init"
    REQUESTED = "requested"      # Plain request sent
    CHALLENGED = "challenged"    # 402 received and decoded
    SELECTING = "selecting"      # Choosing a requirement
    BUILDING = "building"        # Assembling and signing the transfer
    ENCODING = "encoding"        # Building the payment header
    RETRYING = "retrying"        # Paid request sent
    DONE = "done"
    FAILED = "failed"
