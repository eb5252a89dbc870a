import pytest

from clinic.models import MedicalHistory, Notification

pytestmark = pytest.mark.django_db

ANSWERS = {
    'currentMedications': 'Amlodipine 5mg',
    'allergies': 'Penicillin',
    'recentSymptoms': 'Ankle swelling',
}
REPORT = 'https://files.example.com/assessments/7.pdf'


def _submitted(patient, client_for):
    r = client_for(patient).post('/api/medical-history/self-assessment', ANSWERS, format='json')
    assert r.status_code == 200
    return r.data['data']['id']


def _assigned(patient, admin, pharmacist, client_for):
    history_id = _submitted(patient, client_for)
    r = client_for(admin).post('/api/admin/assign-pharmacist',
                               {'patientId': patient.id, 'pharmacistId': pharmacist.id}, format='json')
    assert r.status_code == 200
    return history_id


def test_assessment_workflow(patient, admin, pharmacist, client_for):
    patient_client, pro_client = client_for(patient), client_for(pharmacist.user)
    history_id = _submitted(patient, client_for)

    queue = client_for(admin).get('/api/admin/self-assessments').data['data']
    assert [h['id'] for h in queue] == [history_id]
    assert queue[0]['status'] == 'submitted'

    client_for(admin).post('/api/admin/assign-pharmacist',
                           {'patientId': patient.id, 'pharmacistId': pharmacist.id}, format='json')
    assert Notification.objects.filter(user=pharmacist.user, type='assessment_assigned').exists()
    assert [h['id'] for h in pro_client.get('/api/medical-history/assigned-to-me').data['data']] == [history_id]

    done = pro_client.put(f'/api/medical-history/{history_id}/assessment',
                          {'reportUrl': REPORT, 'notes': 'Review dose with GP'}, format='json')
    assert done.data['data']['status'] == 'completed'
    assert Notification.objects.filter(user=patient, type='assessment_completed').exists()

    unpaid = patient_client.get('/api/medical-history/my-assessments').data['data'][0]
    assert unpaid['pharmacistAssessment']['reportUrl'] == ''
    assert unpaid['pharmacistAssessment']['notes'] == 'Review dose with GP'

    paid = patient_client.post(f'/api/medical-history/{history_id}/pay-report', {'paymentId': 'pay_81'}, format='json')
    assert paid.data['data']['pharmacistAssessment']['reportUrl'] == REPORT
    assert paid.data['data']['reportPayment']['amount'] == 50
    assert paid.data['data']['reportPayment']['pharmacistShare'] == 25

    review = patient_client.post(f'/api/medical-history/{history_id}/review', {'rating': 5}, format='json')
    assert review.data['data']['review']['rating'] == 5
    again = patient_client.post(f'/api/medical-history/{history_id}/review', {'rating': 1}, format='json')
    assert again.data['error']['code'] == 'invalid_state'


def test_record_upsert_and_prescriptions(patient, client_for):
    c = client_for(patient)
    assert c.get('/api/medical-history').data['data'] is None

    c.post('/api/medical-history', {'details': {'bloodGroup': 'O+'}}, format='json')
    c.post('/api/medical-history/prescription', {'prescriptionUrl': 'https://files.example.com/rx/9.jpg'},
           format='json')
    record = c.get('/api/medical-history').data['data']

    assert record['details'] == {'bloodGroup': 'O+'}
    assert record['prescriptions'] == ['https://files.example.com/rx/9.jpg']
    assert record['status'] == 'draft'


def test_empty_self_assessment_is_rejected(patient, client_for):
    r = client_for(patient).post('/api/medical-history/self-assessment', {'allergies': '  '}, format='json')

    assert r.status_code == 400
    assert not MedicalHistory.objects.filter(patient=patient).exists()


def test_assessments_go_to_pharmacists_only(patient, admin, doctor, client_for):
    _submitted(patient, client_for)

    r = client_for(admin).post('/api/admin/assign-pharmacist',
                               {'patientId': patient.id, 'pharmacistId': doctor.id}, format='json')

    assert r.status_code == 400
    assert MedicalHistory.objects.get(patient=patient).assigned_pharmacist is None


def test_only_assignee_posts_report(patient, admin, pharmacist, other_pharmacist, client_for):
    history_id = _assigned(patient, admin, pharmacist, client_for)

    r = client_for(other_pharmacist.user).put(f'/api/medical-history/{history_id}/assessment',
                                              {'reportUrl': REPORT}, format='json')

    assert r.status_code == 403
    assert MedicalHistory.objects.get(pk=history_id).assessment_completed_at is None


def test_resubmission_is_blocked_once_assigned(patient, admin, pharmacist, client_for):
    _assigned(patient, admin, pharmacist, client_for)

    r = client_for(patient).post('/api/medical-history/self-assessment', {'allergies': 'None'}, format='json')

    assert r.data['error']['code'] == 'invalid_state'
    assert MedicalHistory.objects.get(patient=patient).self_assessment['allergies'] == 'Penicillin'


def test_report_is_paid_for_once(patient, other_patient, admin, pharmacist, client_for):
    history_id = _assigned(patient, admin, pharmacist, client_for)
    early = client_for(patient).post(f'/api/medical-history/{history_id}/pay-report', {}, format='json')
    assert early.data['error']['code'] == 'invalid_state'

    client_for(pharmacist.user).put(f'/api/medical-history/{history_id}/assessment', {'reportUrl': REPORT},
                                    format='json')
    stranger = client_for(other_patient).post(f'/api/medical-history/{history_id}/pay-report', {}, format='json')
    assert stranger.status_code == 403

    client_for(patient).post(f'/api/medical-history/{history_id}/pay-report', {}, format='json')
    twice = client_for(patient).post(f'/api/medical-history/{history_id}/pay-report', {}, format='json')
    assert twice.data['error']['code'] == 'invalid_state'


def test_admin_attaches_test_results(patient, admin, pharmacist, client_for):
    url = 'https://files.example.com/labs/hba1c.pdf'
    r = client_for(admin).post('/api/admin/test-results', {'patientId': patient.id, 'reportUrl': url}, format='json')
    assert r.data['data']['documents'] == [url]

    history = client_for(admin).get(f'/api/admin/patients/{patient.id}/medical-history').data['data']
    assert history['documents'] == [url]

    not_a_patient = client_for(admin).post('/api/admin/test-results',
                                           {'patientId': pharmacist.user.id, 'reportUrl': url}, format='json')
    assert not_a_patient.status_code == 404


def test_non_pharmacist_has_no_assessment_queue(doctor, client_for):
    assert client_for(doctor.user).get('/api/medical-history/assigned-to-me').status_code == 403
