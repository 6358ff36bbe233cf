"""Magma Mayhem: hop across a lava grid collecting tiles before the floor catches you."""
