"""Browser page routes."""

from calendar_layout import HOURS_PER_DAY, format_day_label, hour_labels, month_label, shift_week
from services.task_routes import build_week_view, owned_task_or_404, parse_week_reference
from services.validation_service import default_task_times


def index():
    import app as a

    # Signed-in users go straight to their week
    if a.get_current_user():
        return a.redirect(a.url_for('tasks_page'))
    return a.render_template('login.html')


def register_page():
    import app as a

    if a.get_current_user():
        return a.redirect(a.url_for('tasks_page'))
    return a.render_template('register.html')


def tasks_page():
    """Weekly calendar grid."""
    import app as a

    user = a.get_current_user()
    if not user:
        return a.redirect(a.url_for('index'))

    reference = parse_week_reference(a.request.args.get('date'))
    if reference is None:
        a.abort(400)

    view = build_week_view(user, reference)
    grid = view.grid()
    return a.render_template(
        'tasks.html',
        user=user,
        view=view,
        grid=grid,
        day_labels=[format_day_label(d) for d in view.dates],
        hour_labels=hour_labels(),
        hours=range(HOURS_PER_DAY),
        month=month_label(view.reference),
        year=view.reference.year,
        prev_date=shift_week(view.reference, -1).isoformat(),
        next_date=shift_week(view.reference, 1).isoformat(),
    )


def add_task_page():
    import app as a

    user = a.get_current_user()
    if not user:
        return a.redirect(a.url_for('index'))

    defaults = default_task_times(a._now_local())
    defaults.update({'title': '', 'description': '', 'image_url': '', 'all_day': False})
    return a.render_template('task_form.html', mode='add', task=defaults, task_id=None)


def edit_task_page(task_id):
    import app as a

    user = a.get_current_user()
    if not user:
        return a.redirect(a.url_for('index'))

    task = owned_task_or_404(task_id, user)
    return a.render_template('task_form.html', mode='edit', task=task.to_dict(), task_id=task.id)
