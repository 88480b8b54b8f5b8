import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from complaintdesk.access import Principal
from complaintdesk.errors import Conflict
from complaintdesk.models import Complaint, User, UserRole
from complaintdesk.schemas import StatusUpdate
from complaintdesk.services.complaint_service import ComplaintService
from extensions import db


def test_non_admin_is_forbidden(client, resident, auth):
    for path in ('/api/admin/complaints', '/api/admin/users', '/api/admin/stats'):
        assert client.get(path, headers=auth(resident)).status_code == 403


def test_admin_lists_and_filters_complaints(client, resident, neighbour, admin, auth, file_complaint, set_status):
    first = file_complaint(resident)
    file_complaint(neighbour)
    set_status(first['id'], status='in-progress')

    everything = client.get('/api/admin/complaints', headers=auth(admin)).get_json()
    in_progress = client.get('/api/admin/complaints?status=in-progress', headers=auth(admin)).get_json()

    assert everything['total'] == 2
    assert [c['id'] for c in in_progress['complaints']] == [first['id']]


def test_unknown_status_filter(client, admin, auth):
    response = client.get('/api/admin/complaints?status=done', headers=auth(admin))

    assert response.status_code == 400


def test_resolve_without_amount_is_invalid(resident, file_complaint, set_status):
    complaint = file_complaint(resident)

    response = set_status(complaint['id'], status='resolved')

    assert response.status_code == 409
    assert response.get_json()['error'] == 'InvalidTransition'


def test_unknown_status_value_is_rejected(resident, file_complaint, set_status):
    complaint = file_complaint(resident)

    response = set_status(complaint['id'], status='done')

    assert response.status_code == 400


def test_admin_cannot_set_payment_status(resident, file_complaint, set_status):
    complaint = file_complaint(resident)

    response = set_status(complaint['id'], payment_status='completed')

    assert response.status_code == 400


def test_repeating_status_change_is_idempotent(resident, file_complaint, set_status):
    complaint = file_complaint(resident)

    first = set_status(complaint['id'], status='resolved', payment_amount=1500).get_json()['complaint']
    second = set_status(complaint['id'], status='resolved', payment_amount=1500).get_json()['complaint']

    assert second['status'] == first['status'] == 'resolved'
    assert second['payment_status'] == first['payment_status'] == 'pending'
    assert second['payment_amount'] == first['payment_amount'] == 1500.0


def test_comments_and_assignment(resident, admin, file_complaint, set_status):
    complaint = file_complaint(resident)

    response = set_status(complaint['id'], admin_comments='Plumber booked for Monday', assigned_to=admin)

    updated = response.get_json()['complaint']
    assert updated['status'] == 'pending'
    assert updated['admin_comments'] == 'Plumber booked for Monday'
    assert updated['assigned_to'] == admin


def test_assignment_must_target_an_admin(resident, neighbour, file_complaint, set_status):
    complaint = file_complaint(resident)

    response = set_status(complaint['id'], assigned_to=neighbour)

    assert response.status_code == 400


def test_admin_deletes_complaint_in_any_status(client, resident, admin, auth, file_complaint, set_status):
    complaint = file_complaint(resident)
    set_status(complaint['id'], status='rejected')

    response = client.delete(f"/api/admin/complaints/{complaint['id']}", headers=auth(admin))

    assert response.status_code == 200
    assert client.get(f"/api/admin/complaints/{complaint['id']}", headers=auth(admin)).status_code == 404


def test_list_users_hides_admins(client, resident, neighbour, admin, auth):
    response = client.get('/api/admin/users', headers=auth(admin))

    ids = {u['id'] for u in response.get_json()['users']}
    assert ids == {resident, neighbour}


def test_delete_user_cascades(client, app, resident, neighbour, admin, auth, file_complaint, foreign_keys):
    for _ in range(3):
        file_complaint(resident)
    file_complaint(neighbour)

    response = client.delete(f'/api/admin/users/{resident}', headers=auth(admin))

    assert response.status_code == 200
    assert response.get_json()['complaints_deleted'] == 3
    assert client.get(f'/api/admin/users/{resident}', headers=auth(admin)).status_code == 404
    with app.app_context():
        assert Complaint.query.filter_by(user_id=resident).count() == 0
        assert Complaint.query.filter_by(user_id=neighbour).count() == 1


def test_demoted_admin_loses_assignments_and_can_be_deleted(
        client, app, resident, neighbour, admin, auth, file_complaint, set_status, foreign_keys):
    complaint = file_complaint(resident)
    client.put(f'/api/admin/users/{neighbour}/role', json={'role': 'admin'}, headers=auth(admin))
    assert set_status(complaint['id'], assigned_to=neighbour).status_code == 200

    demoted = client.put(f'/api/admin/users/{neighbour}/role', json={'role': 'user'}, headers=auth(admin))
    assert demoted.status_code == 200

    current = client.get(f"/api/admin/complaints/{complaint['id']}", headers=auth(admin)).get_json()
    assert current['complaint']['assigned_to'] is None

    response = client.delete(f'/api/admin/users/{neighbour}', headers=auth(admin))

    assert response.status_code == 200
    assert response.get_json()['complaints_deleted'] == 0
    with app.app_context():
        assert db.session.get(Complaint, complaint['id']) is not None


def test_delete_user_clears_leftover_assignments(client, app, resident, neighbour, admin, auth, file_complaint,
                                                  foreign_keys):
    complaint_id = file_complaint(resident)['id']
    table = Complaint.__table__
    with app.app_context():
        db.session.execute(
            table.update().where(table.c.id == complaint_id).values(assigned_to_id=neighbour)
        )
        db.session.commit()

    response = client.delete(f'/api/admin/users/{neighbour}', headers=auth(admin))

    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Complaint, complaint_id).assigned_to_id is None


def test_payment_amount_requires_resolving(client, resident, admin, auth, file_complaint, set_status):
    complaint = file_complaint(resident)

    for body in ({'status': 'in-progress', 'payment_amount': 100}, {'payment_amount': 100}):
        response = set_status(complaint['id'], **body)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'ValidationError'

    current = client.get(f"/api/admin/complaints/{complaint['id']}", headers=auth(admin)).get_json()
    assert current['complaint']['status'] == 'pending'
    assert current['complaint']['payment_amount'] is None


def test_failed_cascade_keeps_everything(client, app, resident, admin, auth, file_complaint, monkeypatch):
    file_complaint(resident)
    file_complaint(resident)

    def broken_commit(self):
        raise SQLAlchemyError('disk full')

    monkeypatch.setattr(Session, 'commit', broken_commit)
    response = client.delete(f'/api/admin/users/{resident}', headers=auth(admin))
    monkeypatch.undo()

    assert response.status_code == 500
    assert response.get_json()['error'] == 'Internal'
    assert 'no records were removed' in response.get_json()['message']
    with app.app_context():
        assert db.session.get(User, resident) is not None
        assert Complaint.query.filter_by(user_id=resident).count() == 2


def test_admin_accounts_cannot_be_deleted(client, admin, make_user, auth):
    other_admin = make_user('Second Admin', 'ops@example.com', role=UserRole.ADMIN)

    response = client.delete(f'/api/admin/users/{other_admin}', headers=auth(admin))

    assert response.status_code == 403


def test_reset_password(client, resident, admin, auth):
    response = client.put(
        f'/api/admin/users/{resident}/reset-password',
        json={'new_password': 'fresh-pass'},
        headers=auth(admin),
    )
    assert response.status_code == 200

    login = client.post('/api/auth/login', json={'email': 'sindhu@example.com', 'password': 'fresh-pass'})
    assert login.status_code == 200


def test_reset_password_minimum_length(client, resident, admin, auth):
    response = client.put(
        f'/api/admin/users/{resident}/reset-password',
        json={'new_password': 'short'},
        headers=auth(admin),
    )

    assert response.status_code == 400
    assert 'short' not in response.get_data(as_text=True)


def test_reset_password_unknown_user(client, admin, auth):
    response = client.put(
        '/api/admin/users/9999/reset-password',
        json={'new_password': 'long-enough'},
        headers=auth(admin),
    )

    assert response.status_code == 404


def test_role_update_and_self_demotion(client, resident, admin, auth):
    promoted = client.put(f'/api/admin/users/{resident}/role', json={'role': 'admin'}, headers=auth(admin))
    assert promoted.get_json()['user']['role'] == 'admin'

    response = client.put(f'/api/admin/users/{admin}/role', json={'role': 'user'}, headers=auth(admin))
    assert response.status_code == 403


def test_stats(client, resident, admin, auth, file_complaint, set_status):
    first = file_complaint(resident)
    file_complaint(resident)
    set_status(first['id'], status='in-progress')

    stats = client.get('/api/admin/stats', headers=auth(admin)).get_json()
    monthly = client.get('/api/admin/stats/monthly', headers=auth(admin)).get_json()

    assert stats['total_complaints'] == 2
    assert stats['pending'] == 1
    assert stats['in_progress'] == 1
    assert stats['closed'] == 0
    assert stats['users'] == 1
    assert sum(m['total'] for m in monthly['months']) == 2


def test_stale_write_is_a_conflict(app, resident, admin, file_complaint):
    complaint_id = file_complaint(resident)['id']
    table = Complaint.__table__

    with app.app_context():
        complaint = db.session.get(Complaint, complaint_id)
        # Another writer commits in between this read and the update
        db.session.execute(
            table.update().where(table.c.id == complaint_id).values(version=table.c.version + 1)
        )

        with pytest.raises(Conflict):
            ComplaintService.set_status(
                Principal.from_user(db.session.get(User, admin)),
                complaint.id,
                StatusUpdate(status='in-progress'),
            )
