from typing import Sequence


class U:
    @staticmethod
    def ms_to_s(ms: int) -> float:
        return ms / 1000.0

    @staticmethod
    def delay_prefix(delay_ms: int) -> bytes:
        return f"{int(delay_ms)}-".encode("ascii")

    @staticmethod
    def pick_delay(rng, delays: Sequence[int]) -> int:
        """Uniform pick; rng is np.random or a RandomState."""
        idx = int(rng.randint(len(delays)))
        return int(delays[idx])

    @staticmethod
    def grown_capacity(required: int) -> int:
        return required * 2
