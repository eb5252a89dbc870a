import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('clinic', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='MedicalHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('documents', models.JSONField(blank=True, default=list)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('prescriptions', models.JSONField(blank=True, default=list)),
                ('self_assessment', models.JSONField(blank=True, default=dict)),
                ('self_assessment_submitted_at', models.DateTimeField(blank=True, null=True)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('assessment_report_url', models.URLField(blank=True, max_length=512)),
                ('assessment_notes', models.TextField(blank=True)),
                ('assessment_completed_at', models.DateTimeField(blank=True, null=True)),
                ('report_amount', models.PositiveIntegerField(default=50)),
                ('report_pharmacist_share', models.PositiveIntegerField(default=25)),
                ('report_payment_id', models.CharField(blank=True, max_length=128)),
                ('report_paid_at', models.DateTimeField(blank=True, null=True)),
                ('pharmacist_paid', models.BooleanField(default=False)),
                ('review_rating', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ('review_feedback', models.TextField(blank=True)),
                ('review_submitted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('assigned_pharmacist', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assessments', to='clinic.professional')),
                ('patient', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='medical_history', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.AlterField(
            model_name='notification',
            name='type',
            field=models.CharField(choices=[('booking_confirmed', 'Booking confirmed'), ('new_booking', 'New booking'), ('booking_cancelled', 'Booking cancelled'), ('booking_rescheduled', 'Booking rescheduled'), ('meeting_link_added', 'Meeting link added'), ('test_result_uploaded', 'Test result uploaded'), ('session_completed', 'Session completed'), ('review_submitted', 'Review submitted'), ('new_complaint', 'New complaint'), ('complaint_updated', 'Complaint updated'), ('medical_form_assigned', 'Medical form assigned'), ('medical_form_completed', 'Medical form completed'), ('assessment_assigned', 'Assessment assigned'), ('assessment_completed', 'Assessment completed'), ('payment_approved', 'Payment approved')], max_length=32),
        ),
    ]
