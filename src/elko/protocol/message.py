""" A class representation of an elko message, including subclasses for
    the specific messages the client-side object model understands.
"""

from . import fields


class MessageError(ValueError):
    """ Raised when a message envelope or one of its opcode-specific fields
        is malformed. The offending message is dropped; the connection that
        carried it is unaffected.
    """



class Message:
    """ The :class:`Message` is a thin encapsulation of what it means to be
        a message in an elko context: a target reference *to*, an operation
        name *op*, and any number of additional fields specific to that
        operation. This class is used as-is for operations the object model
        does not know about in advance, such as those contributed by mods;
        the subclasses below validate and expose the fields of the
        operations that are known.

        Additional fields are available via item access, as in ``msg['x']``,
        or via :func:`get`.

        :ivar to: The reference string of the target object.
        :ivar op: The operation name.
        :ivar fields: Every field other than *to* and *op*.
    """

    def __init__(self, to, op, fields=None):

        if not isinstance(to, str) or to == '':
            raise MessageError("message 'to' must be a non-empty string")

        if not isinstance(op, str) or op == '':
            raise MessageError("message 'op' must be a non-empty string")

        self.to = to
        self.op = op
        self.fields = dict(fields or ())
        self._validate()


    def _validate(self):
        """ Subclasses check and extract their fields here.
        """

        pass


    def __getitem__(self, key):
        return self.fields[key]


    def __contains__(self, key):
        return key in self.fields


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.to_dict())


    def get(self, key, default=None):
        return self.fields.get(key, default)


    def to_dict(self):
        """ Return the message as a dictionary suitable for JSON encoding,
            with *to* and *op* first.
        """

        result = dict()
        result['to'] = self.to
        result['op'] = self.op
        result.update(self.fields)
        return result


# end of class Message



class Make(Message):
    """ Instruct the target object to create a new object inside itself.
        The *obj* field is the descriptor of the new object; *you* is set
        when the new object represents the local user.
    """

    def _validate(self):

        obj = self.fields.get('obj')
        if not isinstance(obj, dict):
            raise MessageError("'make' requires an 'obj' descriptor object")

        mods = obj.get('mods')
        if mods is not None:
            if not isinstance(mods, list):
                raise MessageError("'mods' in a make descriptor must be a list")
            for mod in mods:
                if not isinstance(mod, dict):
                    raise MessageError("every mod descriptor must be an object")

        self.obj = obj
        self.you = bool(self.fields.get('you', False))


class Delete(Message):
    """ Instruct the target object to destroy itself.
    """


class Ready(Message):
    """ The server has finished describing a context.
    """


class Exit(Message):
    """ The server is closing the session; *why* is an optional explanation.
    """

    def _validate(self):
        self.why = self.fields.get('why')


class Debug(Message):
    """ A diagnostic from the server, addressed to the 'error' object.
    """

    def _validate(self):
        self.msg = self.fields.get('msg')


class Reserve(Message):
    """ A director's answer to a reservation request. Either *deny* is set,
        explaining the refusal, or both *reservation* (the opaque credential)
        and *hostport* (where to use it) are present.
    """

    def _validate(self):

        self.deny = self.fields.get('deny')
        self.reservation = self.fields.get('reservation')
        self.hostport = self.fields.get('hostport')

        if self.deny:
            return

        if not self.reservation or not self.hostport:
            raise MessageError("'reserve' grant requires 'reservation' and 'hostport'")


variants = dict()
variants[fields.MAKE] = Make
variants[fields.DELETE] = Delete
variants[fields.READY] = Ready
variants[fields.EXIT] = Exit
variants[fields.DEBUG] = Debug
variants[fields.RESERVE] = Reserve


def parse(raw):
    """ Validate a decoded message dictionary and return the appropriate
        :class:`Message` instance for its operation. Raises
        :class:`MessageError` if the envelope or any operation-specific
        field is malformed.
    """

    if not isinstance(raw, dict):
        raise MessageError('message is not an object: ' + repr(raw))

    raw = dict(raw)

    try:
        to = raw.pop('to')
        op = raw.pop('op')
    except KeyError as missing:
        raise MessageError('message is missing %s: %r' % (missing, raw))

    cls = variants.get(op, Message)
    return cls(to, op, raw)


def entercontext(context, userinfo=None, template=None):
    """ Build the 'entercontext' request that asks the server to place this
        session in *context*. The *userinfo* dictionary may carry any of
        'auth', 'name', and 'user'; in the absence of 'user', the 'utag' and
        'uparam' pair may be given instead, but only together. A partial
        pair raises :class:`MessageError` and no request is built.
    """

    if userinfo is None:
        userinfo = dict()

    message = dict()
    message['to'] = fields.SESSION
    message['op'] = fields.ENTERCONTEXT
    message['context'] = context

    if template:
        message['ctmpl'] = template

    if userinfo.get('auth'):
        message['auth'] = userinfo['auth']

    if userinfo.get('name'):
        message['name'] = userinfo['name']

    utag = userinfo.get('utag')
    uparam = userinfo.get('uparam')

    if userinfo.get('user'):
        message['user'] = userinfo['user']
    elif utag or uparam:
        if utag and uparam:
            message['utag'] = utag
            message['uparam'] = uparam
        elif utag:
            raise MessageError("user info is missing 'uparam'")
        else:
            raise MessageError("user info is missing 'utag'")

    return message


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
