"""MTA subway feeds: decoding, stop directory, arrivals and line state."""

from redmaple.services.subway.client import SubwayClient
from redmaple.services.subway.decoder import FeedDecoder
from redmaple.services.subway.models import TrainLine, stop_id_to_line
from redmaple.services.subway.stops import StopDirectory

__all__ = [
    "FeedDecoder",
    "StopDirectory",
    "SubwayClient",
    "TrainLine",
    "stop_id_to_line",
]
