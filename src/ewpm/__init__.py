"""EWPM - employee work, payment follow-up and analytics core."""
