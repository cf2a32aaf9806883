"""Deterministic acceptance policy for asynchronously arriving responses.

This module contains *no* payload parsing. The engines tag each request
when it is issued and ask these predicates whether the response may still
mutate the store when it arrives.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyaismap.models.requests import SearchQuery


@dataclass(frozen=True, slots=True)
class RouteTag:
    """Identity and selection epoch a route request was issued under."""

    mmsi: str
    epoch: int


def is_current_route(tag: RouteTag, *, selected: str | None, epoch: int) -> bool:
    """A route response applies only while its vessel is still the selection.

    Any reselection or clear bumps the epoch, so a response issued before it
    is dropped even if the same vessel was selected again afterwards.
    """
    return selected is not None and tag.mmsi == selected and tag.epoch == epoch


def should_apply_poll(*, issued: SearchQuery, current: SearchQuery, stopped: bool) -> bool:
    """A list response applies only if the engine runs and the query is unchanged."""
    if stopped:
        return False
    return issued == current
