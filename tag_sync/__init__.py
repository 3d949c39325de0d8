"""tag-sync: propagate and reconcile EC2 instance, volume and snapshot tags."""

__version__ = "0.1.0"
