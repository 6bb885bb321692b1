"""Backup rotation, promotion of build output, and manual rollback."""

from __future__ import annotations

import logging
import shlex
import shutil

from pushdeploy.errors import PromotionError
from pushdeploy.layout import DeployLayout

logger = logging.getLogger(__name__)


def rotate_backup(layout: DeployLayout) -> bool:
    """Move the live directory to the backup slot.

    Returns False (and touches nothing) on a first deployment with no live
    directory yet.
    """
    if not layout.live.exists():
        logger.info("no live directory at %s; skipping backup rotation", layout.live)
        return False
    if layout.backup.exists():
        shutil.rmtree(layout.backup)
    layout.live.rename(layout.backup)
    logger.info("rotated %s to %s", layout.live, layout.backup)
    return True


def promote(layout: DeployLayout) -> None:
    if not layout.dist.is_dir():
        raise PromotionError(f"build output missing: {layout.dist}")
    if layout.live.exists():
        raise PromotionError(f"live directory still present: {layout.live}")
    shutil.move(str(layout.dist), str(layout.live))
    logger.info("promoted %s to %s", layout.dist, layout.live)


def rollback(layout: DeployLayout) -> None:
    if not layout.backup.is_dir():
        raise PromotionError(f"no backup to roll back to: {layout.backup}")
    if layout.live.exists():
        shutil.rmtree(layout.live)
    layout.backup.rename(layout.live)
    logger.info("rolled back %s from %s", layout.live, layout.backup)


def revert_instruction(layout: DeployLayout) -> str:
    live = shlex.quote(str(layout.live))
    backup = shlex.quote(str(layout.backup))
    return f"rm -rf {live} && mv {backup} {live}"
