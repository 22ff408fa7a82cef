""" The client-side object model. Every object the server can address lives
    in a :class:`elko.session.Session` object table, keyed by its reference
    string, and understands some set of operations. An object's operations
    are the ``op_<name>`` methods of its class, plus the ``op_<name>``
    methods of every :class:`Mod` attached to it; the union is computed once,
    when the object is constructed, and stored as a flat table mapping the
    operation name directly to a bound handler.
"""

import logging

from . import weakref

logger = logging.getLogger(__name__)


def operations(cls):
    """ Return a dictionary mapping operation names to method names for every
        ``op_<name>`` method defined by *cls* or its ancestors.
    """

    table = dict()

    for name in dir(cls):
        if not name.startswith('op_'):
            continue

        if callable(getattr(cls, name)):
            table[name[3:]] = name

    return table


def run_hook(target, name):
    """ Invoke the lifecycle hook *name* on *target*, if it has one. A hook
        that raises is logged and otherwise ignored, so that one misbehaving
        mod cannot leave an object half-constructed.
    """

    hook = getattr(target, name, None)

    if hook is None:
        return

    try:
        hook()
    except Exception:
        logger.exception('%s hook failed for %r', name, target)


class Dispatchable:
    """ Anything that can be the target of a message. The *session* is the
        :class:`elko.session.Session` the object belongs to; *ref* is its
        unique reference string. Any *mods* are attached in order, and a
        later mod's operation replaces an earlier one (or the object's own)
        of the same name.
    """

    def __init__(self, session, ref, mods=()):

        self.session = session
        self.ref = ref
        self.mods = dict()

        for mod in mods:
            self.mods[mod.tag] = mod
            mod.object = self

        self.operations = self._compose()


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.ref)


    def _compose(self):

        table = dict()

        for op, name in operations(type(self)).items():
            table[op] = getattr(self, name)

        for mod in self.mods.values():
            for op, name in operations(type(mod)).items():
                table[op] = getattr(mod, name)

        return table


# end of class Dispatchable



class SessionObject(Dispatchable):
    """ An object that can contain other objects. Children are created by a
        'make' message sent to their container, and destroy themselves upon
        receipt of a 'delete' message. The container exclusively owns its
        :ivar contents: list; a child keeps only a weak reference back to its
        container, available as the :func:`container` property.

        The *descriptor* is the object description sent by the server,
        retained as-is for application use.
    """

    def __init__(self, session, ref, mods=(), descriptor=None):

        Dispatchable.__init__(self, session, ref, mods)

        if descriptor is None:
            descriptor = dict()

        self.descriptor = descriptor
        self.contents = list()
        self._container = weakref.ref(None)


    @classmethod
    def from_descriptor(cls, session, descriptor, mods=()):
        """ Construct a new instance from an object descriptor.
        """

        return cls(session, descriptor['ref'], mods, descriptor)


    @property
    def container(self):
        return self._container()


    @container.setter
    def container(self, container):
        self._container = weakref.ref(container)


    def op_make(self, message):
        """ Create a new object inside this one, as described by the 'obj'
            field of the *message*. The new object is fully linked to this
            container and its creation hooks have run before it becomes
            visible in the session's object table.
        """

        descriptor = message.obj
        ref = descriptor.get('ref')
        session = self.session

        if not ref or not isinstance(ref, str):
            logger.error("make with no 'ref' for new object: %r", message)
            return

        if session.get_object(ref) is not None:
            logger.error('make for preexisting object %r', ref)
            return

        child = session.make_object(descriptor)
        child.container = self
        self.contents.append(child)

        if message.you:
            session.user = child

        if descriptor.get('type') == 'context':
            session.context = child

        for mod in child.mods.values():
            run_hook(mod, 'on_make')

        run_hook(child, 'on_make')
        session.add_object(child)


    def op_delete(self, message):
        """ Destroy this object.
        """

        container = self.container

        if container is not None:
            contents = container.contents
            for index in range(len(contents)):
                if contents[index] is self:
                    del contents[index]
                    break

        self.container = None

        for mod in self.mods.values():
            run_hook(mod, 'on_delete')

        run_hook(self, 'on_delete')
        self.session.remove_object(self)


# end of class SessionObject



class Plain(SessionObject):
    """ The stand-in for an object whose type is missing or unknown: every
        field of the descriptor that does not collide with the object's own
        attributes is copied onto the instance verbatim.
    """

    reserved = frozenset(('session', 'ref', 'mods', 'operations', 'descriptor', 'contents', 'container'))

    def __init__(self, session, ref, mods=(), descriptor=None):

        SessionObject.__init__(self, session, ref, mods, descriptor)

        for key, value in self.descriptor.items():
            if key in self.reserved or not key.isidentifier():
                continue
            if key.startswith(('_', 'op_', 'on_')):
                continue
            setattr(self, key, value)


# end of class Plain



class Mod:
    """ A capability unit attached to exactly one owning object. Subclasses
        contribute ``op_<name>`` methods, which are merged into the owner's
        operation table; they may also define ``on_make()`` and
        ``on_delete()`` hooks, invoked when the owner is created or
        destroyed. The owner is available as the :func:`object` property.
    """

    tag = None

    def __init__(self, tag=None, descriptor=None):

        if tag is not None:
            self.tag = tag

        if descriptor is None:
            descriptor = dict()

        self.descriptor = descriptor
        self._object = weakref.ref(None)


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.tag)


    @classmethod
    def from_descriptor(cls, descriptor):
        return cls(descriptor['type'], descriptor)


    @property
    def object(self):
        return self._object()


    @object.setter
    def object(self, owner):
        self._object = weakref.ref(owner)


    @property
    def session(self):
        owner = self.object
        if owner is None:
            return None
        return owner.session


# end of class Mod



class TypeDefinition:
    """ Associates a type *tag*, as found in the 'type' field of an object or
        mod descriptor, with the class implementing it. The optional
        *factory* replaces the class's own :func:`from_descriptor`; it takes
        the same arguments.
    """

    def __init__(self, tag, cls, factory=None):

        self.tag = tag
        self.cls = cls
        self.factory = factory
        self.mod = issubclass(cls, Mod)


    def __repr__(self):
        return 'TypeDefinition(%r, %s)' % (self.tag, self.cls.__name__)


    @property
    def operations(self):
        """ The base operation table for the type, mapping each operation
            name to the name of the method that handles it.
        """

        return operations(self.cls)


    def make(self, session, descriptor, mods=()):

        factory = self.factory
        if factory is None:
            factory = self.cls.from_descriptor

        if self.mod:
            return factory(descriptor)
        else:
            return factory(session, descriptor, mods)


# end of class TypeDefinition


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
