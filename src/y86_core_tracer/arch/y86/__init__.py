# src/y86_core_tracer/arch/y86/__init__.py
"""
Y86-64 Architecture Package
"""
from .cpu import Y86Cpu
