import asyncio
from datetime import timedelta
from pillguard.core.clock import DeviceClock
from pillguard.db.medications import MedicationRepository
from pillguard.db.reminders import ReminderRepository
from pillguard.db.taken_log import TakenLogRepository
from pillguard.models.medication import Frequency
from pillguard.services.monitor import check_due_medications
from pillguard.services.reminders import ReminderScheduler
from support import NEW_YORK, NOW, RecordingNotifier, SlowNotifier, ny


def _scheduler(store, notifier=None):
    return ReminderScheduler(ReminderRepository(store), notifier or RecordingNotifier())


def test_arms_reminder_at_next_dose(store, make_med):
    reminder = asyncio.run(_scheduler(store).schedule_reminder(make_med(), 0, NOW, NEW_YORK))

    assert reminder.fire_at == ny(2024, 1, 15, 8)
    assert reminder.title == "Medication Reminder"
    assert reminder.body == "It's time to take your Lisinopril"
    assert reminder.data == {"dosage": "10mg"}


def test_taken_dose_moves_reminder_to_tomorrow(store, make_med):
    scheduler = _scheduler(store)
    asyncio.run(scheduler.schedule_reminder(make_med(), 0, NOW, NEW_YORK))
    asyncio.run(scheduler.schedule_reminder(make_med(), 1, NOW, NEW_YORK))

    pending = asyncio.run(scheduler.pending())
    assert len(pending) == 1
    assert pending[0].fire_at == ny(2024, 1, 16, 8)


def test_past_dose_is_not_armed(store, make_med):
    scheduler = _scheduler(store)
    asyncio.run(scheduler.schedule_reminder(make_med(), 0, NOW, NEW_YORK))

    overdue = make_med(scheduled_times=["06:00"])
    assert asyncio.run(scheduler.schedule_reminder(overdue, 0, NOW, NEW_YORK)) is None
    assert asyncio.run(scheduler.pending()) == []


def test_interval_reminder_without_start_is_not_armed(store, make_med):
    med = make_med(frequency=Frequency.EVERY_X_HOURS, interval_hours=8, scheduled_times=[])
    assert asyncio.run(_scheduler(store).schedule_reminder(med, 0, NOW, NEW_YORK)) is None


def test_cancel_reminder(store, make_med):
    scheduler = _scheduler(store)
    asyncio.run(scheduler.schedule_reminder(make_med(), 0, NOW, NEW_YORK))
    assert asyncio.run(scheduler.cancel_reminder("med-1"))
    assert not asyncio.run(scheduler.cancel_reminder("med-1"))


def test_pending_is_sorted_by_fire_time(store, make_med):
    scheduler = _scheduler(store)
    asyncio.run(scheduler.schedule_reminder(make_med(id="late", scheduled_times=["21:00"]), 0, NOW, NEW_YORK))
    asyncio.run(scheduler.schedule_reminder(make_med(id="early", scheduled_times=["09:00"]), 0, NOW, NEW_YORK))
    assert [r.medication_id for r in asyncio.run(scheduler.pending())] == ["early", "late"]


def test_dispatch_due_sends_and_clears(store, make_med):
    notifier = RecordingNotifier()
    scheduler = _scheduler(store, notifier)
    asyncio.run(scheduler.schedule_reminder(make_med(id="a", scheduled_times=["08:00"]), 0, NOW, NEW_YORK))
    asyncio.run(scheduler.schedule_reminder(make_med(id="b", scheduled_times=["20:00"]), 0, NOW, NEW_YORK))

    sent = asyncio.run(scheduler.dispatch_due(ny(2024, 1, 15, 8)))

    assert [r.medication_id for r in sent] == ["a"]
    assert notifier.reminders == [("Medication Reminder", "It's time to take your Lisinopril", "a")]
    assert [r.medication_id for r in asyncio.run(scheduler.pending())] == ["b"]


def test_dispatch_due_with_nothing_pending(store):
    assert asyncio.run(_scheduler(store).dispatch_due(NOW)) == []


def test_monitor_pass_reports_due_medications(store, make_med):
    asyncio.run(MedicationRepository(store).save([
        make_med(id="due", scheduled_times=["08:00"]),
        make_med(id="later", scheduled_times=["12:00"]),
    ]))
    clock = DeviceClock(zone=NEW_YORK, fixed_now=ny(2024, 1, 15, 8) + timedelta(seconds=2))

    due = asyncio.run(check_due_medications(store, clock))
    assert [m.id for m in due] == ["due"]


def test_monitor_pass_skips_doses_already_taken(store, make_med):
    asyncio.run(MedicationRepository(store).save([make_med(id="due", scheduled_times=["08:00"])]))
    asyncio.run(TakenLogRepository(store).record_dose("due", ny(2024, 1, 15, 8).date()))
    clock = DeviceClock(zone=NEW_YORK, fixed_now=ny(2024, 1, 15, 8))

    assert asyncio.run(check_due_medications(store, clock)) == []


def test_reminder_armed_during_delivery_is_kept(store, make_med):
    scheduler = _scheduler(store, SlowNotifier())
    asyncio.run(scheduler.schedule_reminder(make_med(id="a", scheduled_times=["08:00"]), 0, NOW, NEW_YORK))

    async def deliver_while_arming():
        async def arm_other():
            await asyncio.sleep(0)
            await scheduler.schedule_reminder(make_med(id="c", scheduled_times=["20:00"]), 0, NOW, NEW_YORK)

        await asyncio.gather(scheduler.dispatch_due(ny(2024, 1, 15, 8)), arm_other())

    asyncio.run(deliver_while_arming())
    assert [r.medication_id for r in asyncio.run(scheduler.pending())] == ["c"]


def test_reminder_rearmed_during_delivery_keeps_new_time(store, make_med):
    scheduler = _scheduler(store, SlowNotifier())
    med = make_med(id="a", scheduled_times=["08:00"])
    asyncio.run(scheduler.schedule_reminder(med, 0, NOW, NEW_YORK))

    async def deliver_while_taking():
        async def take_dose():
            await asyncio.sleep(0)
            await scheduler.schedule_reminder(med, 1, NOW, NEW_YORK)

        await asyncio.gather(scheduler.dispatch_due(ny(2024, 1, 15, 8)), take_dose())

    asyncio.run(deliver_while_taking())
    pending = asyncio.run(scheduler.pending())
    assert [r.fire_at for r in pending] == [ny(2024, 1, 16, 8)]
