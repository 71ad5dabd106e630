from dataclasses import dataclass


@dataclass
class DbConfig:
    url: str
    pool_pre_ping: bool = True
    echo: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must be a non-empty SQLAlchemy database URL")


@dataclass
class QueueConfig:
    stream_key: str
    consumer_group: str
    consumer_name: str
    block_ms: int = 5_000
    value_field: str = "value"

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.block_ms <= 0:
            raise ValueError(
                "block_ms must be > 0; Redis interprets 0 as infinite blocking"
            )


@dataclass
class LoopConfig:
    # Upper bound on how long a stop() can go unobserved while the source is idle.
    block_ms: int = 1_000

    def __post_init__(self) -> None:
        if self.block_ms <= 0:
            raise ValueError("block_ms must be > 0")
