"""Stage outcome reporting"""

import sys
from typing import Callable

from loguru import logger

from .models import StageOutcome, StageStatus


StageObserver = Callable[[str, str, StageOutcome], None]


def log_stage(stage: str, collection_key: str, outcome: StageOutcome) -> None:
    """Default observer: one structured log line per stage outcome"""
    bound = logger.bind(stage=stage, collection=collection_key, status=outcome.status.value)
    if outcome.status == StageStatus.OK:
        bound.info(f"[{collection_key}] {stage}: {len(outcome.token_ids)} token(s)")
    elif outcome.status == StageStatus.VERIFIED_ZERO:
        bound.info(f"[{collection_key}] {stage}: verified zero balance")
    else:
        bound.debug(f"[{collection_key}] {stage} skipped: {outcome.reason}")


def notify(observer: StageObserver, stage: str, collection_key: str, outcome: StageOutcome) -> None:
    """Call an observer without letting it affect the cascade"""
    try:
        observer(stage, collection_key, outcome)
    except Exception as e:
        logger.warning(f"Stage observer failed for {collection_key}/{stage}: {e}")


def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at the given level"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
