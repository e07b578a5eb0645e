"""Lifespan inflation calculator backend."""
