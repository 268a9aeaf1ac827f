import argparse
import logging
import sys

import numpy as np

from comms.channel import ChannelError, DelayedChannel
from config import Config


def parse_args(argv=None) -> Config:
    parser = argparse.ArgumentParser(description="Drive a DelayedChannel: write a message, then read it back slowly")
    parser.add_argument("--delays", type=int, nargs="+", help="Candidate read delays in ms", default=None)
    parser.add_argument("--message", type=str, help="Bytes to write before reading", default=None)
    parser.add_argument("--reads", type=int, help="Number of reads", default=None)
    parser.add_argument("--seed", type=int, help="Seed np.random once", default=None)
    parser.add_argument("--thread-safe", action="store_true", help="Guard the buffer with a lock")
    parser.add_argument("--log-level", type=str, help="Logging level", default=None)

    args = parser.parse_args(argv)
    cfg = Config()
    if args.delays is not None:
        cfg.DELAYS_MS = np.array(args.delays, dtype=int)
    if args.message is not None:
        cfg.MESSAGE = args.message
    if args.reads is not None:
        cfg.READS = args.reads
    if args.seed is not None:
        cfg.SEED = args.seed
    if args.log_level is not None:
        cfg.LOG_LEVEL = args.log_level.upper()
    cfg.THREAD_SAFE = args.thread_safe
    return cfg


def run(cfg: Config) -> int:
    if cfg.SEED is not None:
        np.random.seed(cfg.SEED)

    channel = DelayedChannel(cfg.delays(), thread_safe=cfg.THREAD_SAFE)
    channel.write(cfg.MESSAGE.encode("utf-8"))
    logging.info(f"[SETUP] {channel!r}")

    try:
        for i in range(cfg.READS):
            dest = bytearray(64 + len(channel))
            n, eof = channel.read_into(dest)
            print(f"read {i}: {bytes(dest[:n]).decode('utf-8', errors='replace')} ({n} bytes, {eof!r})")
    except ChannelError as e:
        logging.error(f"[READ] {e}")
        return 1

    sys.stdout.flush()
    channel.print_bufferln()
    return 0


def main(argv=None) -> int:
    cfg = parse_args(argv)
    logging.basicConfig(level=getattr(logging, cfg.LOG_LEVEL, logging.INFO))
    return run(cfg)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        logging.exception(f"Fatal error: {e}")
        sys.exit(1)
