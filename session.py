from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from distribution import DistributionSummary
from errors import AgeStatsError, DecodeError, NoValidDataError, UploadInProgressError
from source import ActiveSource, DefaultSource, UploadedSource, handle_upload, summarize
from utils.config_parser import Config, load_config
from utils.logger import UploadLogger, get_logger, setup_logging

log = get_logger("session")


@dataclass(frozen=True)
class UploadOutcome:
    accepted: bool
    notice: Optional[str] = None
    error: Optional[AgeStatsError] = None
    sample_count: int = 0


class AgeDistributionSession:
    """
    Holds the active source for one viewer.

    The active source is only ever swapped for a fully built replacement;
    a failed upload leaves it exactly as it was.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or load_config()
        self._clock = clock or datetime.now
        self._active: ActiveSource = DefaultSource()
        self._busy = False
        self.uploads = UploadLogger(verbosity=self.config.logging.get("verbosity", 1))

    @property
    def active(self) -> ActiveSource:
        return self._active

    @property
    def busy(self) -> bool:
        """True while an upload is processed; UIs disable the upload trigger on it."""
        return self._busy

    def summary(self) -> DistributionSummary:
        return summarize(self._active)

    def chart_records(self) -> List[Dict[str, Any]]:
        return self.summary().to_records(self.config.display["label_format"])

    def chart_frame(self) -> pd.DataFrame:
        return self.summary().to_frame(self.config.display["label_format"])

    def reset(self) -> None:
        self._active = DefaultSource()

    def upload(self, file_name: str, content: bytes) -> UploadOutcome:
        if self._busy:
            raise UploadInProgressError("An upload is already being processed.", details=file_name)

        data_cfg = self.config.data
        display = self.config.display
        started = self._clock()
        self._busy = True
        try:
            new_active = handle_upload(
                self._active,
                file_name,
                content,
                column_index=data_cfg["column_index"],
                min_age=data_cfg["min_age"],
                max_age=data_cfg["max_age"],
                timestamp_format=display["timestamp_format"],
                clock=self._clock,
            )
        except NoValidDataError as exc:
            log.warning("'%s' rejected: %s", file_name, exc)
            return self._reject(file_name, started, exc, display["no_valid_data_notice"])
        except DecodeError as exc:
            log.warning("'%s' could not be decoded: %s", file_name, exc)
            return self._reject(file_name, started, exc, display["decode_error_notice"])
        finally:
            self._busy = False

        self._active = new_active
        self._record(file_name, started, "accepted", len(new_active.samples))
        return UploadOutcome(accepted=True, sample_count=len(new_active.samples))

    # -----------------------------
    # internal helpers
    # -----------------------------
    def _reject(self, file_name: str, started: datetime, exc: AgeStatsError, notice: str) -> UploadOutcome:
        self._record(file_name, started, type(exc).__name__, 0)
        return UploadOutcome(accepted=False, notice=notice, error=exc)

    def _record(self, file_name: str, started: datetime, outcome: str, sample_count: int) -> None:
        self.uploads.append_row(
            {
                "file_name": file_name,
                "timestamp": started.strftime(self.config.display["timestamp_format"]),
                "outcome": outcome,
                "sample_count": sample_count,
                "active_source": "upload" if isinstance(self._active, UploadedSource) else "default",
            }
        )


def create_session(config_path: str | Path | None = None) -> AgeDistributionSession:
    """Load config, configure logging from it, and start a session on the default sample."""
    config = load_config(config_path)
    setup_logging(
        level=config.logging.get("level", "INFO"),
        log_file=config.logging.get("log_file"),
        format_style=config.logging.get("format_style", "detailed"),
    )
    log.debug("effective config:\n%s", config.dump_effective())
    return AgeDistributionSession(config=config)
