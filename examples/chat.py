""" A minimal chat client. It enters a context, either directly or through a
    director, and prints whatever anyone in the context says; lines typed on
    stdin are spoken aloud. The context is expected to carry the server's
    'schat' mod.
"""

import asyncio
import sys

import elko


class SimpleChat(elko.Mod):
    """ Client half of the server's 'schat' context mod.
    """

    def op_say(self, message):

        speaker = message.get('from')
        thing = self.session.get_object(speaker)

        if thing is None:
            name = speaker
        else:
            name = thing.name

        print('%s: %s' % (name, message.get('speech')))


    def op_push(self, message):
        print('(pushed %s)' % (message.get('url')))


    def say(self, speech):

        user = self.session.user
        if user is None:
            return

        request = dict()
        request['to'] = self.object.ref
        request['op'] = 'say'
        request['speech'] = speech
        self.session.send(request)


async def chatter(session):

    loop = asyncio.get_running_loop()

    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if line == '':
            break

        context = session.context
        if context is None or 'schat' not in context.mods:
            print('(not in a chat context yet)')
            continue

        context.mods['schat'].say(line.rstrip('\n'))


async def main(arguments):

    elko.trace.configure()

    session = elko.Session()
    session.add_type(elko.TypeDefinition('schat', SimpleChat))

    if arguments.director:
        session.connect_to_context_via_director(arguments.root, arguments.context, {'name': arguments.name})
    else:
        session.connect_to_context(arguments.root, arguments.context, {'name': arguments.name})

    try:
        await chatter(session)
    finally:
        await session.close()


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(
        description='Chat in an elko context'
    )
    parser.add_argument(
        'root',
        help='Server root, such as localhost:9000 or ws://localhost:9001/ws'
    )
    parser.add_argument(
        'context',
        help='Reference of the context to enter'
    )
    parser.add_argument(
        '-n', '--name',
        help='Name to appear under (default: Anonymous)',
        default='Anonymous'
    )
    parser.add_argument(
        '-d', '--director',
        help='Treat the root as a director and ask it for a reservation',
        action='store_true'
    )

    asyncio.run(main(parser.parse_args()))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
