"""
Logging Configuration and Audit Trail Infrastructure.

Every module obtains its logger through :func:`get_logger`. Consistency
checks additionally report their residuals to the :class:`AuditLogger`,
which groups them into validation runs so that an accuracy regression
(round-trip, symmetry or additivity drift) can be traced afterwards.
"""

import hashlib
import json
import logging
import math
import sys
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the geodesy library.

    Parameters
    ----------
    name : str
        Logger name, normally the module's ``__name__``.
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Logger with a single stdout handler attached.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(stream)
    logger.setLevel(level)
    return logger


def config_fingerprint(config: Dict[str, Any]) -> str:
    """Short stable digest of a run configuration (key order ignored)."""
    canonical = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class CheckResidual:
    """One residual measured by a consistency check.

    Attributes
    ----------
    check_name : str
        Property that was checked, e.g. ``'round_trip'`` or ``'symmetry'``.
    residual_value : float
        Magnitude of the deviation from the exact identity.
    tolerance : float
        Largest residual accepted as a pass.
    passed : bool
        ``residual_value <= tolerance``; a NaN residual never passes.
    context : dict
        Inputs of the check (end points, azimuth, leg lengths).
    recorded_at : datetime
        Wall-clock time of the measurement.
    """
    check_name: str
    residual_value: float
    tolerance: float
    passed: bool
    context: Dict[str, Any] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["recorded_at"] = self.recorded_at.isoformat()
        return out


@dataclass
class ValidationRun:
    """Residuals collected between entering and leaving a run context."""
    run_id: str
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    config_hash: str = ""
    check_residuals: List[CheckResidual] = field(default_factory=list)

    @property
    def failures(self) -> List[CheckResidual]:
        return [r for r in self.check_residuals if not r.passed]

    def per_check(self) -> Dict[str, Dict[str, Any]]:
        """Count, failures and worst residual for each check name."""
        table: Dict[str, Dict[str, Any]] = {}
        for r in self.check_residuals:
            row = table.get(r.check_name)
            if row is None:
                row = table[r.check_name] = {
                    "count": 0, "failed": 0, "max_residual": 0.0,
                    "tolerance": r.tolerance,
                }
            row["count"] += 1
            if not r.passed:
                row["failed"] += 1
            if math.isnan(r.residual_value):
                row["max_residual"] = math.nan
            elif not math.isnan(row["max_residual"]):
                row["max_residual"] = max(row["max_residual"], abs(r.residual_value))
        return table

    def header(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "config_hash": self.config_hash,
            "start_time": self.started_at.isoformat(),
            "end_time": self.finished_at.isoformat() if self.finished_at else None,
        }


class AuditLogger:
    """Process-wide collector of consistency-check residuals.

    All instances are the same object. Runs are registered under a lock,
    and the active run is tracked per thread, so concurrent threads may
    each drive their own run.

    Examples
    --------
    >>> audit = AuditLogger()
    >>> with audit.run_context("wgs84_roundtrip") as run:
    ...     _ = audit.log_check_residual("round_trip", 3e-9, 1e-6)
    >>> audit.get_run_summary("wgs84_roundtrip")["total_checks"]
    1
    """

    _instance: Optional['AuditLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'AuditLogger':
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._runs = {}
                instance._active = threading.local()
                instance._logger = get_logger("audit")
                cls._instance = instance
        return cls._instance

    def _current_run(self) -> Optional[ValidationRun]:
        return getattr(self._active, "run", None)

    def _lookup(self, run_id: str) -> ValidationRun:
        with self._lock:
            run = self._runs.get(run_id)
        if run is None:
            raise KeyError(f"No run found with ID {run_id}")
        return run

    @contextmanager
    def run_context(
        self, run_id: str, config: Optional[Dict[str, Any]] = None
    ) -> Iterator[ValidationRun]:
        """Collect every residual logged on this thread into one run.

        Parameters
        ----------
        run_id : str
            Identifier of the run; reusing an identifier replaces the run.
        config : dict, optional
            Settings of the run (ellipsoid, tolerances); their fingerprint
            is stored as ``config_hash``.

        Yields
        ------
        ValidationRun
            The run being filled.
        """
        run = ValidationRun(run_id, config_hash=config_fingerprint(config) if config else "")
        with self._lock:
            self._runs[run_id] = run
        outer = self._current_run()
        self._active.run = run
        self._logger.info(f"Starting run {run_id} (config {run.config_hash or '-'})")
        try:
            yield run
        finally:
            run.finished_at = datetime.now()
            self._active.run = outer
            self._logger.info(
                f"Completed run {run_id}: {len(run.check_residuals)} checks, "
                f"{len(run.failures)} failed"
            )

    def log_check_residual(
        self,
        check_name: str,
        residual_value: float,
        tolerance: float,
        context: Optional[Dict[str, Any]] = None,
    ) -> CheckResidual:
        """Record one residual, attaching it to the active run if any.

        Failures are logged at WARNING, passes at DEBUG.

        Returns
        -------
        CheckResidual
            The stored record.
        """
        # comparison with NaN is False
        passed = bool(abs(residual_value) <= tolerance)
        record = CheckResidual(check_name, residual_value, tolerance, passed, dict(context or {}))

        run = self._current_run()
        if run is not None:
            run.check_residuals.append(record)

        message = (
            f"GEODESIC CHECK | {check_name} | {'PASS' if passed else 'FAIL'} | "
            f"residual={residual_value:.6e} (tolerance={tolerance:.6e})"
        )
        self._logger.log(logging.DEBUG if passed else logging.WARNING, message)
        return record

    def get_run_summary(self, run_id: str) -> Dict[str, Any]:
        """Run header plus per-check counts and worst residuals.

        Raises
        ------
        KeyError
            If no run with this identifier was started.
        """
        run = self._lookup(run_id)
        return {
            **run.header(),
            "total_checks": len(run.check_residuals),
            "checks": run.per_check(),
        }

    def export_run_artifacts(self, run_id: str, output_path: Union[str, Path]) -> None:
        """Write the run header and every residual record as JSON."""
        run = self._lookup(run_id)
        payload = {
            **run.header(),
            "check_residuals": [r.to_dict() for r in run.check_residuals],
        }
        Path(output_path).write_text(json.dumps(payload, indent=2, default=str))
        self._logger.info(f"Exported audit artifacts to {output_path}")
