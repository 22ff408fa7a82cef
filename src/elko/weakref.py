import weakref


def ref(thing):
    """ Return a weak reference to the supplied argument, regardless of
        whether it is a simple object or a bound method. A None argument
        yields a callable that always returns None, so that a cleared
        back-reference behaves the same as one whose target has gone away.
    """

    if thing is None:
        return _dead

    try:
        thing.__func__
        thing.__self__
    except AttributeError:
        return weakref.ref(thing)
    else:
        return weakref.WeakMethod(thing)


def _dead():
    return None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
