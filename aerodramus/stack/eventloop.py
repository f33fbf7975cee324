import aerodramus

if aerodramus._stack_name is None:
    aerodramus.init('tornado')

if aerodramus._stack_name == 'tornado':
    from aerodramus.tornado_stack.eventloop import evlp, queue_task, run, halt
elif aerodramus._stack_name == 'twisted':
    from aerodramus.twisted_stack.eventloop import evlp, queue_task, run, halt
