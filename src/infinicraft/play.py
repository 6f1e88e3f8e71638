from __future__ import annotations

import logging

from .core.errors import GenerationError
from .core.models import STARTER_ITEMS
from .features.session import RoomManager
from .ui.presenters import RichPresenter

logger = logging.getLogger(__name__)


def run_play(manager: RoomManager, presenter: RichPresenter, *, name: str = "") -> str:
    """Interactive crafting loop in a fresh room; returns the room id."""

    room_id = manager.create_room(name)
    room = manager.get_room(room_id)
    presenter.start_room(room_id, room.name)

    while True:
        items = room.items()
        presenter.show_items(items)
        pair = presenter.prompt_pair(len(items))
        if pair is None:
            break
        a, b = items[pair[0]], items[pair[1]]
        presenter.crafting(a, b)
        try:
            result = room.craft(a, b)
        except GenerationError as exc:
            logger.debug("craft failed", exc_info=True)
            presenter.show_error(str(exc))
            continue
        presenter.show_result(result)

    presenter.summary(room.items(), len(STARTER_ITEMS))
    return room_id
