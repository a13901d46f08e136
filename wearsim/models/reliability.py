# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Weibull reliability distributions used to describe how long aging devices survive under some workload."""

from __future__ import annotations

import math
from scipy.special import gamma

from wearsim.exceptions import IncompatibleShapeError, UserConfigError

__all__ = ['MTTFSegment', 'WeibullDist']


class MTTFSegment:
    """
    A period of time over which a device ages at a constant rate, expressed through the mean time to failure that the
    device would have if it operated at that rate indefinitely.

    Attributes
    ----------
    duration: float
        Length of the period in seconds
    mttf: float
        Mean time to failure in seconds for the operating point held during the period, may be infinite
    """
    __slots__ = ['duration', 'mttf']

    def __init__(self, duration: float, mttf: float):
        if duration < 0:
            raise UserConfigError(f"MTTF segment duration cannot be negative, got {duration}.")
        self.duration = duration
        self.mttf = mttf

    def __repr__(self):
        return f"MTTFSegment(duration={self.duration}, mttf={self.mttf})"


class WeibullDist:
    """
    Weibull survivor function R(t) = exp(-(t/alpha)^beta) describing the fraction of a device population that is still
    functional after operating for time t. Aging mechanisms show increasing failure rates over time, so beta > 1 is
    used for all of them (beta = 2 by default, see JEDEC JEP122H).

    An infinite alpha represents a device that never ages, i.e. R(t) = 1 for all t.

    Attributes
    ----------
    alpha: float
        The scale (rate) parameter in seconds
    beta: float
        The shape parameter
    """
    __slots__ = ['alpha', 'beta']

    def __init__(self, alpha: float = 1, beta: float = 2):
        if not alpha > 0:
            raise UserConfigError(f"Weibull scale parameter must be positive or infinite, got {alpha}.")
        self.alpha = alpha
        self.beta = beta

    @classmethod
    def from_segments(cls, beta: float, segments: list[MTTFSegment]) -> WeibullDist:
        """
        Build a single distribution that summarizes a time-varying operating profile.

        Each segment's MTTF is converted to the corresponding scale parameter, then the segments' aging rates (duration
        divided by scale) are averaged over the full profile duration and inverted. Method from Xiang et al., "System-
        level reliability modeling for MPSoCs," CODES+ISSS 2010.

        Parameters
        ----------
        beta: float
            The shape parameter shared by all the segments
        segments: list of MTTFSegment
            The time-ordered piecewise-constant aging profile, typically one representative period of operation

        Returns
        -------
        WeibullDist
            The distribution with the duration-weighted harmonic mean scale parameter of the segments
        """
        mean_scale = gamma(1 / beta + 1)
        total_rate, total_time = 0.0, 0.0
        for seg in segments:
            if not seg.mttf > 0:
                raise UserConfigError(f"Cannot build a reliability distribution from non-positive MTTF {seg.mttf}, "
                                      "operating conditions exceed the failure criterion immediately.")
            # Infinite MTTF segments contribute no aging
            if not math.isinf(seg.mttf):
                total_rate += seg.duration / (seg.mttf / mean_scale)
            total_time += seg.duration
        if total_time == 0:
            raise UserConfigError('Cannot build a reliability distribution from an operating profile with no duration.')
        if total_rate == 0:
            return cls(math.inf, beta)
        return cls(total_time / total_rate, beta)

    @classmethod
    def estimate(cls, ttfs: list[float], beta: float = 2) -> WeibullDist:
        """Estimate the scale parameter for a set of observed failure times given a known shape parameter."""
        if len(ttfs) == 0:
            raise UserConfigError('At least one failure time is needed to estimate a Weibull distribution.')
        return cls((sum(ttf ** beta for ttf in ttfs) / len(ttfs)) ** (1 / beta), beta)

    @property
    def rate(self) -> float:
        return self.alpha

    def reliability(self, t: float) -> float:
        """Probability of surviving to age t."""
        if math.isinf(self.alpha):
            return 1.0
        return math.exp(-((t / self.alpha) ** self.beta))

    def inverse(self, r: float) -> float:
        """
        Age at which the survival probability drops to r.

        Parameters
        ----------
        r: float
            Target survival probability within (0, 1]

        Returns
        -------
        float
            The age in seconds, infinite if the device never ages or r is 0
        """
        if math.isinf(self.alpha) or r <= 0:
            return math.inf
        return self.alpha * (-math.log(r)) ** (1 / self.beta)

    def mttf(self) -> float:
        return self.alpha * gamma(1 / self.beta + 1)

    def combine(self, other: WeibullDist) -> WeibullDist:
        """
        Compute the distribution of a series system of two independent devices, which survives only while both do.
        The product of two Weibull survivor functions is only Weibull if they share the same shape parameter.

        Raises
        ------
        IncompatibleShapeError
            If the two distributions have different shape parameters
        """
        if self.beta != other.beta:
            raise IncompatibleShapeError(f"The product of Weibull distributions with shapes {self.beta} and "
                                         f"{other.beta} does not follow a Weibull distribution.")
        total = (1 / self.alpha) ** self.beta + (1 / other.alpha) ** self.beta
        if total == 0:
            return WeibullDist(math.inf, self.beta)
        return WeibullDist(total ** (-1 / self.beta), self.beta)

    def __call__(self, t: float) -> float:
        return self.reliability(t)

    def __mul__(self, other: WeibullDist) -> WeibullDist:
        return self.combine(other)

    def __repr__(self):
        return f"WeibullDist(alpha={self.alpha}, beta={self.beta})"
