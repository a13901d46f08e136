# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""
Physical aging mechanism models that compute the time to failure of a device for a given operating point.

References
----------
[1] "Failure Mechanisms and Models for Semiconductor Devices," JEDEC Solid State Technology Association, JEP122H, 2011.
[2] F. Oboril and M. B. Tahoori, "ExtraTime: Modeling and analysis of wearout due to transistor aging at
    microarchitecture-level," DSN 2012.
[3] R. Vattikonda, W. Wang, Y. Cao, "Modeling and minimization of PMOS NBTI effect for robust nanometer design,"
    DAC 2006.
[4] K. Joshi, S. Mukhopadhyay, N. Goel, S. Mahapatra, "A consistent physical framework for N and P BTI in HKMG
    MOSFETs," IRPS 2012.
[5] J. R. Black, "Electromigration - a brief survey and some recent results," IEEE Trans. Electron Devices, 1969.
[6] J. Srinivasan, S. V. Adve, P. Bose, J. A. Rivers, "The case for lifetime reliability-aware microprocessors,"
    ISCA 2004.
"""

from __future__ import annotations

import math
from enum import Enum

from wearsim.models.reliability import MTTFSegment, WeibullDist
from wearsim.models.traces import DataPoint
from wearsim.exceptions import InvalidTypeError
from wearsim.helpers import logger, _linterp

__all__ = ['MechType', 'FailMech', 'NBTI', 'EM', 'HCI', 'TDDB', 'MECH_TYPES', 'mech_class', 'load_params']

# Universal constants
ELECTRON_CHARGE = 1.60217662e-19    # C
BOLTZMANN_CONST_EV = 8.6173303e-5   # eV/K
EV_PER_JOULE = 6.242e18

SECONDS_PER_DAY = 3600 * 24


class MechType(Enum):
    NBTI = 'NBTI'
    EM = 'EM'
    HCI = 'HCI'
    TDDB = 'TDDB'


def load_params(file: str) -> dict:
    """
    Read model parameter overrides from a file of tab-separated name-value pairs, one per line. Lines starting with '#'
    are comments. Unreadable lines and missing files are reported and skipped.

    Parameters
    ----------
    file: str
        Path to the parameter file

    Returns
    -------
    dict of float
        Mapping from parameter names to their values
    """
    params = {}
    try:
        with open(file) as f:
            lines = f.read().splitlines()
    except OSError:
        logger.warning(f"{file}: parameter file not found")
        return params
    for i, line in enumerate(lines, start=1):
        if not line.strip() or line.startswith('#'):
            continue
        tokens = line.split('\t')
        try:
            if len(tokens) != 2:
                raise ValueError
            params[tokens[0].strip()] = float(tokens[1])
        except ValueError:
            logger.warning(f"{file}: {i}: unable to parse line")
    return params


class FailMech:
    """
    Base class for all aging mechanisms. Holds the process parameters shared between mechanisms and defines the
    common interface for computing times to failure. All mechanisms are assumed to follow a Weibull distribution with
    shape parameter 2 [1].

    This class should not be instantiated directly, use an inheriting class.

    Attributes
    ----------
    mech_type: MechType
        Identifier of the mechanism, used as the key when storing per-mechanism results
    beta: float
        Weibull shape parameter used for the mechanism's reliability distributions
    prms: dict of float
        The device and process parameters used by the mechanism's equations
    """
    mech_type: MechType = None
    beta = 2
    # Relative delay change that constitutes failure [2]
    fail_default = 0.05
    # Process defaults, mainly from [3]
    tech_defaults = {
        'L': 65,            # nm
        'Vt0_p': 0.5,       # PMOS threshold voltage, V
        'Vt0_n': 0.5,       # NMOS threshold voltage, V
        'tox': 1.8,         # nm
        'Cox': 1.92e-20,    # F/nm^2
        'alpha': 1.3,       # alpha power law [2]
    }
    mech_defaults = {}

    def __init__(self, tech_prms: dict = None, mech_prms: dict = None):
        """
        Parameters
        ----------
        tech_prms: dict of float, optional
            Overrides for the technology parameters shared by all mechanisms
        mech_prms: dict of float, optional
            Overrides for the parameters specific to this mechanism, applied after the technology parameters
        """
        self.prms = dict(self.tech_defaults)
        self.prms.update(self.mech_defaults)
        if tech_prms:
            self.prms.update(tech_prms)
        if mech_prms:
            self.prms.update(mech_prms)

    @property
    def name(self) -> str:
        return self.mech_type.value

    def time_to_failure(self, data: DataPoint, duty_cycle: float, fail: float = None) -> float:
        raise NotImplementedError(f"Mechanism {type(self).__name__} does not define a time to failure model.")

    def distribution(self, segments: list[MTTFSegment]) -> WeibullDist:
        """Summarize a piecewise aging profile computed with this mechanism as a single reliability distribution."""
        return WeibullDist.from_segments(self.beta, segments)

    def _dvth_fail(self, vdd: float, vt0: float, fail: float) -> float:
        """Threshold voltage shift that produces the requested relative delay increase under the alpha power law [2]"""
        return (vdd - vt0) - (vdd - vt0) / ((1 + fail) ** (1 / self.prms['alpha']))

    def __repr__(self):
        return f"{type(self).__name__}()"


class NBTI(FailMech):
    """
    Negative bias temperature instability, using the reaction-diffusion plus hole trapping model of [4]. The model
    cannot be inverted, so the threshold voltage shift is integrated forwards in fixed time steps until it passes the
    failure criterion and the crossing time is linearly interpolated from the final two steps.
    """
    mech_type = MechType.NBTI
    mech_defaults = {
        'A': 5.5e12,
        'B': 8e11,
        'Gamma_IT': 4.5,
        'Gamma_HT': 4.5,
        'E_Akf': 0.175,     # eV
        'E_Akr': 0.2,       # eV
        'E_ADH2': 0.58,     # eV
        'E_AHT': 0.03,      # eV
    }
    time_step = SECONDS_PER_DAY
    # Roughly 2700 years of daily steps, past which the device is treated as never failing
    max_steps = 1_000_000

    def __init__(self, tech_prms: dict = None, mech_prms: dict = None):
        super().__init__(tech_prms, mech_prms)
        self._cache = {}

    def degradation(self, time: float, vdd: float, dvth: float, temp: float, duty_cycle: float) -> float:
        """
        Threshold voltage shift after stressing for 'time' seconds, given the shift 'dvth' that has already occurred.

        Parameters
        ----------
        time: float
            Stress time in seconds
        vdd: float
            Supply voltage in volts
        dvth: float
            Prior threshold voltage shift, reduces the effective gate overdrive
        temp: float
            Temperature in kelvin
        duty_cycle: float
            Fraction of time the PMOS device is under stress

        Returns
        -------
        float
            The threshold voltage shift in volts
        """
        p = self.prms
        # Effective duty cycle accounting for recovery while not stressed [2]
        duty_cycle = (duty_cycle / (1 + math.sqrt((1 - duty_cycle) / 2))) ** (1 / 6)
        overdrive = vdd - p['Vt0_p'] - dvth
        if overdrive < 0:
            logger.warning(f"Subthreshold VDD {vdd} not supported for NBTI; operating at threshold instead")
            overdrive = 0
        e_ait = (2 / 3) * (p['E_Akf'] - p['E_Akr']) + p['E_ADH2'] / 6
        dn_it = p['A'] * (overdrive ** p['Gamma_IT']) * math.exp(-e_ait / (BOLTZMANN_CONST_EV * temp)) * \
            (time ** (1 / 6))
        dn_ht = p['B'] * (overdrive ** p['Gamma_HT']) * math.exp(-p['E_AHT'] / (BOLTZMANN_CONST_EV * temp))
        return duty_cycle * 0.027e-12 * (dn_it + dn_ht)

    def time_to_failure(self, data: DataPoint, duty_cycle: float, fail: float = None) -> float:
        if fail is None:
            fail = self.fail_default
        if duty_cycle == 0:
            return math.inf
        vdd, temp = data['vdd'], data['temperature']
        # Traces tend to repeat operating points, and each integration can take tens of thousands of steps
        key = (vdd, temp, duty_cycle, fail)
        if key not in self._cache:
            self._cache[key] = self._integrate(vdd, temp, duty_cycle, fail)
        return self._cache[key]

    def _integrate(self, vdd, temp, duty_cycle, fail):
        dvth_fail = self._dvth_fail(vdd, self.prms['Vt0_p'], fail)
        if dvth_fail <= 0:
            logger.warning(f"Subthreshold VDD {vdd} cannot reach the NBTI failure criterion; treating as no aging")
            return math.inf

        dvth, dvth_prev, t = 0.0, 0.0, 0.0
        for _ in range(self.max_steps):
            dvth_prev = dvth
            dvth = self.degradation(t, vdd, dvth, temp, duty_cycle)
            if dvth >= dvth_fail:
                break
            t += self.time_step
        else:
            logger.warning(f"NBTI degradation did not reach the failure criterion within {self.max_steps} days at "
                           f"VDD {vdd}, T {temp}, duty cycle {duty_cycle}; treating as no aging")
            return math.inf

        if t == 0:
            # Already past the criterion at the first step, interpolate from the unstressed state
            return _linterp(dvth_fail, (0.0, 0.0), (dvth, self.time_step))
        return _linterp(dvth_fail, (dvth_prev, t - self.time_step), (dvth, t))


class EM(FailMech):
    """Electromigration, using Black's equation [5]."""
    mech_type = MechType.EM
    mech_defaults = {
        'n': 2,
        'Ea': 0.8,              # eV
        'w': 4.5e-7,            # m
        'h': 1.2e-6,            # m
        'A': 3.22e21,
        'wire_density': 1,      # wires/m^2
    }

    def current_density(self, data: DataPoint) -> float:
        if 'current_density' in data:
            return data['current_density']
        area = self.prms['w'] * self.prms['h']
        if 'current' in data:
            return data['current'] / area
        logger.warning('Current density or current not found in trace data; approximating as P/V')
        if data['vdd'] <= 0:
            return 0.0
        return data['power'] / data['vdd'] / area

    def time_to_failure(self, data: DataPoint, duty_cycle: float, fail: float = None): # noqa: UnusedParameter
        j = self.current_density(data)
        if j <= 0:
            return math.inf
        p = self.prms
        return p['A'] * (j ** -p['n']) * math.exp(p['Ea'] / (BOLTZMANN_CONST_EV * data['temperature']))


class HCI(FailMech):
    """Hot carrier injection, using the invertible model of [1]."""
    mech_type = MechType.HCI
    mech_defaults = {
        'E0': 0.8,          # V/nm
        'K': 1.7e8,         # nm/C^0.5
        'A_bulk': 0.005,
        'phi_it': 3.7,      # eV
        'lambda': 7.8,      # nm
        'l': 17,            # nm
        'Esat': 0.011,      # V/nm
        'n': 0.45,
    }

    def time_to_failure(self, data: DataPoint, duty_cycle: float, fail: float = None) -> float:
        if fail is None:
            fail = self.fail_default
        freq = data['frequency']
        if duty_cycle == 0 or freq == 0:
            return math.inf
        p = self.prms
        vdd = data['vdd']
        overdrive = vdd - p['Vt0_n']
        if overdrive <= 0:
            logger.warning(f"Subthreshold VDD {vdd} not supported for HCI; treating as no aging")
            return math.inf
        dvth_fail = self._dvth_fail(vdd, p['Vt0_n'], fail)

        v_thermal = BOLTZMANN_CONST_EV / EV_PER_JOULE * data['temperature'] / ELECTRON_CHARGE
        vdsat = ((overdrive + 2 * v_thermal) * p['L'] * p['Esat']) / \
            (overdrive + 2 * v_thermal + p['A_bulk'] * p['L'] * p['Esat'])
        e_m = (vdd - vdsat) / p['l']
        e_ox = overdrive / p['tox']
        a_hci = ELECTRON_CHARGE / p['Cox'] * p['K'] * math.sqrt(p['Cox'] * overdrive)
        shift_rate = a_hci * math.exp(e_ox / p['E0']) * \
            math.exp(-p['phi_it'] / EV_PER_JOULE / (ELECTRON_CHARGE * p['lambda'] * e_m))
        return (dvth_fail / shift_rate) ** (1 / p['n']) / (duty_cycle * freq)


class TDDB(FailMech):
    """Time-dependent dielectric breakdown, using the voltage and temperature model of [6]."""
    mech_type = MechType.TDDB
    mech_defaults = {
        'a': 78,
        'b': -0.081,    # 1/K
        'X': 0.759,     # eV
        'Y': -66.8,     # eV*K
        'Z': -8.37e-4,  # eV/K
    }

    def time_to_failure(self, data: DataPoint, duty_cycle: float, fail: float = None): # noqa: UnusedParameter
        p = self.prms
        vdd, temp = data['vdd'], data['temperature']
        if vdd <= 0:
            return math.inf
        return (vdd ** (p['b'] * temp - p['a'])) * \
            math.exp((p['X'] + p['Y'] / temp + p['Z'] * temp) / (BOLTZMANN_CONST_EV * temp))


MECH_TYPES = {'nbti': NBTI, 'em': EM, 'hci': HCI, 'tddb': TDDB}


def mech_class(name: str) -> type:
    """Look up an aging mechanism class by its case-insensitive name."""
    try:
        return MECH_TYPES[name.lower()]
    except KeyError as e:
        raise InvalidTypeError(f"Unknown aging mechanism '{name}', options are {', '.join(MECH_TYPES)}.") from e
