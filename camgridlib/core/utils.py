#!/usr/bin/env python3

import decimal
import shlex
from decimal import Decimal
from fractions import Fraction

#============================================

_QUIET_MODE = False

#============================================

def set_quiet_mode(value: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(value)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def log(message: str) -> None:
	if _QUIET_MODE:
		return
	print(message)

#============================================

def show_cmd(argv: list) -> str:
	showcmd = shlex.join([str(arg) for arg in argv])
	log(f"CMD: '{showcmd}'")
	return showcmd

#============================================

def parse_timecode(raw_time) -> Decimal:
	"""
	Parse seconds or a [hh:]mm:ss.sss timecode into seconds.
	"""
	if raw_time is None:
		raise RuntimeError("time value is required")
	if isinstance(raw_time, bool):
		raise RuntimeError("time values must be int, float, or timecode string")
	if isinstance(raw_time, int):
		return Decimal(raw_time)
	if isinstance(raw_time, float):
		return Decimal(str(raw_time))
	if isinstance(raw_time, str):
		value = raw_time.strip()
		sign = Decimal(1)
		if value.startswith('-'):
			sign = Decimal(-1)
			value = value[1:].strip()
		try:
			if ':' not in value:
				return sign * Decimal(value)
			parts = value.split(':')
			seconds = Decimal(parts.pop())
			minutes = Decimal(parts.pop())
			hours = Decimal(0)
			if len(parts) > 0:
				hours = Decimal(parts.pop())
		except decimal.InvalidOperation:
			raise RuntimeError(f"invalid timecode: {raw_time}")
		return sign * (hours * Decimal(3600) + minutes * Decimal(60) + seconds)
	raise RuntimeError("time values must be int, float, or timecode string")

#============================================

def parse_milliseconds(raw_time) -> int:
	"""
	Integers are taken as milliseconds; strings are timecodes in seconds.
	"""
	if isinstance(raw_time, bool):
		raise RuntimeError("time values must be int, float, or timecode string")
	if isinstance(raw_time, int):
		return raw_time
	if isinstance(raw_time, float):
		return round_half_up_fraction(Fraction(str(raw_time)))
	seconds = parse_timecode(raw_time)
	return round_half_up_fraction(Fraction(str(seconds)) * 1000)

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def nearest_even(value) -> int:
	"""
	Round to the nearest even integer, halves away from zero like Math.round.
	"""
	return 2 * round_half_up_fraction(Fraction(value) / 2)

#============================================

def floor_even(value) -> int:
	return 2 * (Fraction(value) // 2)

#============================================

def ms_to_seconds(timestamp: int) -> str:
	seconds = Fraction(timestamp, 1000)
	return f"{float(seconds):.3f}"

#============================================

def parse_resolution(raw_resolution, label: str) -> tuple:
	if not isinstance(raw_resolution, (list, tuple)) or len(raw_resolution) != 2:
		raise RuntimeError(f"{label} must be [width, height]")
	width = parse_int(raw_resolution[0], f"{label} width")
	height = parse_int(raw_resolution[1], f"{label} height")
	if width <= 0 or height <= 0:
		raise RuntimeError(f"{label} must be positive")
	return (width, height)

#============================================

def parse_int(raw_value, label: str) -> int:
	if isinstance(raw_value, bool):
		raise RuntimeError(f"{label} must be an integer")
	try:
		return int(raw_value)
	except (TypeError, ValueError):
		raise RuntimeError(f"{label} must be an integer, got {raw_value!r}")
