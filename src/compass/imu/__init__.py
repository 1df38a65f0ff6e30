"""Accelerometer + magnetometer heading pipeline."""
