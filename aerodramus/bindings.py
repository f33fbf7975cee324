# Keep UI widgets in step with a promise.  Widgets are duck-typed and held
# weakly, so a binding never keeps a widget alive.
import weakref


def _fraction(progress):
    fraction = getattr(progress, 'fraction_completed', progress)
    if fraction is None:
        return None
    return max(0.0, min(1.0, float(fraction)))


def bind_activity_indicator(indicator, promise):
    """
    Start ``indicator`` animating now and stop it once ``promise`` settles.
    """
    ref = weakref.ref(indicator)
    indicator.start_animating()

    def settled(value, error):
        indicator = ref()
        if indicator is not None:
            indicator.stop_animating()
    promise.on_settled(settled)


def bind_progress_view(view, promise):
    """
    Mirror ``promise``'s progress notifications in ``view.progress`` (a
    fraction from 0.0 to 1.0), and fill it up once the promise settles.
    """
    ref = weakref.ref(view)

    def settled(value, error):
        view = ref()
        if view is not None:
            view.progress = 1.0

    def progressed(progress):
        view = ref()
        fraction = _fraction(progress)
        if view is not None and fraction is not None:
            view.progress = fraction
    promise.on_progress(progressed).on_settled(settled)
