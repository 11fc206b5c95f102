"""Core modules for the bill rings chart engine."""

from . import (
	aggregate,
	chart,
	config,
	inner,
	logging_setup,
	merge,
	records,
	scaffold,
	scaling,
	scatter,
	synth,
	trend,
	utils,
	viz,
)

__all__ = [
	"aggregate",
	"chart",
	"config",
	"inner",
	"logging_setup",
	"merge",
	"records",
	"scaffold",
	"scaling",
	"scatter",
	"synth",
	"trend",
	"utils",
	"viz",
]
