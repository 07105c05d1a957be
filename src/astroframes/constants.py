"""
The `constants` module defines the angular and time constants used by the
reference-frame transformations.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Full circle in radians. Equal to 2pi. Units: *rad*
"""
TWOPI = 2.0 * PI

"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

"""
Constant to convert radians to arcseconds. Equal to (360*3600)/(2pi). Units: *as/rad*
"""
RAD2AS = 360.0 * 3600.0 / PI / 2.0

"""
Constant to convert milliarcseconds to radians. Units: *rad/mas*
"""
MAS2RAD = 1e-3 * AS2RAD

"""
Constant to convert hours of right ascension to radians. Equal to 2pi/24. Units: *rad/h*
"""
HOUR2RAD = 2.0 * PI / 24.0

"""
Number of hours in a day, the period of right ascension. Units: *h*
"""
DAY_HOURS = 24.0

# Time Constants

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
JD_J2000 = 2451545.0

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Number of days in a Julian century. Units: *days*
"""
JULIAN_CENTURY_DAYS = 36525.0

"""
Number of seconds in a day. Units: *s*
"""
DAY = 86400.0

# Reference Frame Constants

"""
Obliquity of the ecliptic at J2000.0, IAU 2006. Units: *as*

References:

1. N. Capitaine, P. T. Wallace, and J. Chapront, *Expressions for IAU 2000
   precession quantities*, Astronomy & Astrophysics 412, 2003
"""
EPS0_J2000 = 84381.406

"""
ICRS frame bias in x (xi_0). Units: *as*

References:

1. D. D. McCarthy and G. Petit, *IERS Technical Note 32*, 2003, Chapter 5
"""
FRAME_BIAS_XI0 = -0.0166170

"""
ICRS frame bias in y (eta_0). Units: *as*
"""
FRAME_BIAS_ETA0 = -0.0068192

"""
ICRS frame bias in right ascension of the J2000 mean equinox (d_alpha_0). Units: *as*
"""
FRAME_BIAS_DA0 = -0.01460
