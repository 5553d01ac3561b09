"""
Tests for the shared helpers and the Unset sentinel.

This module verifies:
- Singleton identity, falsy semantics and representation of Unset.
- Copying, deep copying and pickling preserve identity.
- Finality (UnsetType cannot be subclassed).
- coalesce, mirror, rename and pad behavior.
"""
import copy
import pickle
import unittest
from threading import Thread
from unittest import TestCase

from clasp.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingletonIdentity(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, 0)

    def testRepresentation(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesPreserveIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testConcurrentConstruction(self):
        results = []

        def build():
            results.append(UnsetType())

        threads = [Thread(target=build) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertTrue(all(result is Unset for result in results))

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass

    def testUnionWithTypes(self):
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)


class HelpersTest(TestCase):
    """
    Test suite for coalesce, mirror, rename and pad.
    """

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "fallback"), "")

    def testMirrorReturnsDefensiveCopies(self):
        class Holder:
            items = mirror("items")
            missing = mirror("missing")

            def __init__(self):
                self._items = [1, 2]
                self._missing = Unset

        holder = Holder()
        holder.items.append(3)
        self.assertEqual(holder.items, [1, 2])
        self.assertIsNone(holder.missing)
        with self.assertRaises(AttributeError):
            holder.items = []

    def testMirrorRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(3)

    def testRenameForms(self):
        def function():
            pass

        self.assertEqual(rename(function, "renamed").__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(3, "name")

    def testPadNeverTruncates(self):
        self.assertEqual(pad("-w", 5), "-w   ")
        self.assertEqual(pad("--very-long-pattern", 5), "--very-long-pattern")


if __name__ == "__main__":
    unittest.main()
