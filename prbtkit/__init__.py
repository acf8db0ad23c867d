"""Analytic inverse-kinematics front end and safety exception types for a six-axis manipulator."""

__version__ = "0.1.0"

__all__ = ["exceptions", "ik_types", "ik_kinematics"]