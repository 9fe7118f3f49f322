"""
Tests for the internal helpers.

This module verifies semantic guarantees of:
- The `Unset` sentinel (singleton identity, falsy semantics, finality, copy and
  pickle stability, use in isinstance unions).
- coalesce(), rename() and mirror().
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from shellstatus.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.

    This suite asserts that:
    - UnsetType() always returns the same instance (singleton).
    - The sentinel is falsy but not equal to other falsy values.
    - Copy/deepcopy/pickle round-trips preserve identity.
    - The type is final and composes into isinstance unions.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported object on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        The sentinel is falsy and prints as 'Unset'.
        """
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values.
        """
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testCopyAndPicklePreserveSingleton(self) -> None:
        """
        copy(), deepcopy() and pickle round-trips keep the identity.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})

    def testUnion(self) -> None:
        """
        `str | Unset` works as an isinstance target.
        """
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(1, str | Unset))


class HelpersTest(TestCase):
    """coalesce(), rename() and mirror()."""

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "default"), "default")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", ()):
            self.assertIs(coalesce(value, "default"), value)

    def testRenameCallable(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self) -> None:
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorFreezesContainers(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ["a", ["b"]]
                self._table = {"key": {"x"}}

        holder = Holder()
        self.assertEqual(holder.items, ("a", ("b",)))
        self.assertEqual(holder.table["key"], frozenset({"x"}))
        with self.assertRaises(TypeError):
            holder.table["other"] = 1
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == '__main__':
    unittest.main()
