"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # ABC thresholds (cumulative % of value before an item)
    abc_a_threshold: float = 80.0
    abc_b_threshold: float = 95.0

    # Record source — delimited consumption reports
    record_header_rows: int = 4  # report title + filter + two column-header lines
    record_total_marker: str = "Всего"  # totals row label in exported reports
    record_delimiter: str = ","


settings = Settings()
