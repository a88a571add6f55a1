"""Reconciliation of the generated-component directory."""

from aiscript.reconcile.reconciler import Reconciler

__all__ = ["Reconciler"]
