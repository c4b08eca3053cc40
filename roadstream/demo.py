"""Small demonstration harness driving the streamer with a scripted observer."""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import numpy as np

from .config import load_seed, load_streaming_config
from .control_points import make_rng
from .streaming import SegmentStreamer

LOGGER = logging.getLogger(__name__)


class RoadFollower:
    """Observer that drives along the road at constant speed.

    It heads for the end of the segment it is currently on and moves to
    the next segment once that end is reached.
    """

    def __init__(self, streamer: SegmentStreamer, speed: float) -> None:
        self.streamer = streamer
        self.speed = speed
        first = streamer.segments[0]
        self.position = first.start_position.copy()
        self.target_span = first.span_index

    def advance(self, dt: float) -> np.ndarray:
        budget = self.speed * dt
        while budget > 0.0:
            target = self._target()
            if target is None:
                break
            offset = target - self.position
            gap = float(np.linalg.norm(offset))
            if gap <= budget:
                self.position = target.copy()
                self.target_span += 1
                budget -= gap
            else:
                self.position = self.position + offset * (budget / gap)
                budget = 0.0
        return self.position

    def _target(self) -> Optional[np.ndarray]:
        for segment in self.streamer.segments:
            if segment.span_index == self.target_span:
                return segment.end_position
        return None


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stream an endless road and river in front of a scripted observer")
    parser.add_argument("--seed", type=int, default=None, help="World seed (defaults to $ROADSTREAM_SEED)")
    parser.add_argument("--ticks", type=int, default=600, help="Number of simulation steps")
    parser.add_argument("--dt", type=float, default=1.0 / 30.0, help="Seconds per step")
    parser.add_argument("--speed", type=float, default=25.0, help="Observer speed in metres per second")
    parser.add_argument("--config", default=None, help="JSON file with streaming parameters")
    parser.add_argument("--report-every", type=int, default=60, help="Steps between window summaries")
    parser.add_argument("--verbose", action="store_true", help="Log every segment and chunk")
    return parser


def run(args: argparse.Namespace) -> SegmentStreamer:
    params = load_streaming_config(config_path=args.config)
    seed = args.seed if args.seed is not None else load_seed()
    streamer = SegmentStreamer(params, rng=make_rng(seed))
    streamer.start()
    follower = RoadFollower(streamer, args.speed)

    for step in range(args.ticks):
        position = follower.advance(args.dt)
        streamer.tick(position, args.dt)
        if args.report_every > 0 and step % args.report_every == 0:
            LOGGER.info("step %d at %s: %s", step, np.round(position, 2), streamer.summary())
    LOGGER.info("Final window: %s", streamer.band_summary())
    return streamer


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    run(args)
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via ``python -m`` execution
    raise SystemExit(main())
