"""CSV and text export helpers for trial logs and model fits."""

from .tabular import (
    TRIAL_LOG_COLUMNS,
    model_fit_records,
    read_trial_log_csv,
    session_metadata,
    trial_log_records,
    write_hbayesdm_txt,
    write_model_fits_csv,
    write_trial_log_csv,
)

__all__ = [
    "TRIAL_LOG_COLUMNS",
    "model_fit_records",
    "read_trial_log_csv",
    "session_metadata",
    "trial_log_records",
    "write_hbayesdm_txt",
    "write_model_fits_csv",
    "write_trial_log_csv",
]
