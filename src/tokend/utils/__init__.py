"""Small helpers shared across tokend."""
