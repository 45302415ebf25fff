"""Data anchor — side tables that hold per-container metadata.

Containers never carry hidden fields. Their Observer, their sealed state
and the never-observe marker live here instead, keyed weakly by container
identity so an unreferenced container takes its metadata with it.
"""

import weakref

# container -> Observer
observers: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

# Records closed to new keys.
sealed: weakref.WeakSet = weakref.WeakSet()

# Containers that must never be observed (rendered output and the like).
raw: weakref.WeakSet = weakref.WeakSet()
