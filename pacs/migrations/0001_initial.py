import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('patient_name', models.CharField(max_length=255, unique=True)),
                ('patient_id', models.CharField(blank=True, db_index=True, max_length=64)),
                ('patient_birth_date', models.CharField(blank=True, max_length=8, null=True)),
                ('patient_birth_time', models.CharField(blank=True, max_length=16, null=True)),
                ('patient_sex', models.CharField(blank=True, max_length=16, null=True)),
                ('other_patient_ids', models.CharField(blank=True, max_length=1000, null=True)),
                ('other_patient_names', models.CharField(blank=True, max_length=1000, null=True)),
                ('ethnic_group', models.CharField(blank=True, max_length=64, null=True)),
                ('patient_comments', models.TextField(blank=True, null=True)),
                ('patient_age', models.CharField(blank=True, max_length=4, null=True)),
                ('patient_size', models.FloatField(blank=True, null=True)),
                ('patient_weight', models.FloatField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'patients',
                'ordering': ['patient_name'],
            },
        ),
        migrations.CreateModel(
            name='Study',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('study_instance_uid', models.CharField(max_length=64, unique=True)),
                ('study_id', models.CharField(blank=True, max_length=16, null=True)),
                ('study_description', models.CharField(blank=True, max_length=1000, null=True)),
                ('study_date', models.CharField(blank=True, db_index=True, max_length=8, null=True)),
                ('study_time', models.CharField(blank=True, max_length=16, null=True)),
                ('accession_number', models.CharField(blank=True, max_length=16, null=True)),
                ('modalities_in_study', models.CharField(blank=True, max_length=255, null=True)),
                ('referring_physician_name', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='studies', to='pacs.patient')),
            ],
            options={
                'verbose_name_plural': 'studies',
                'db_table': 'studies',
                'ordering': ['study_instance_uid'],
                'indexes': [models.Index(fields=['patient'], name='studies_patient_idx')],
            },
        ),
        migrations.CreateModel(
            name='Series',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('series_instance_uid', models.CharField(max_length=64, unique=True)),
                ('series_number', models.IntegerField(blank=True, null=True)),
                ('modality', models.CharField(blank=True, max_length=16, null=True)),
                ('series_description', models.CharField(blank=True, max_length=1000, null=True)),
                ('series_date', models.CharField(blank=True, max_length=8, null=True)),
                ('series_time', models.CharField(blank=True, max_length=16, null=True)),
                ('performing_physician_name', models.CharField(blank=True, max_length=255, null=True)),
                ('protocol_name', models.CharField(blank=True, max_length=255, null=True)),
                ('operators_name', models.CharField(blank=True, max_length=255, null=True)),
                ('body_part_examined', models.CharField(blank=True, max_length=64, null=True)),
                ('patient_position', models.CharField(blank=True, max_length=16, null=True)),
                ('laterality', models.CharField(blank=True, max_length=16, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('study', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='series', to='pacs.study')),
            ],
            options={
                'verbose_name_plural': 'series',
                'db_table': 'series',
                'ordering': ['series_number'],
                'indexes': [models.Index(fields=['study'], name='series_study_idx')],
            },
        ),
        migrations.CreateModel(
            name='Instance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sop_instance_uid', models.CharField(max_length=64, unique=True)),
                ('path', models.CharField(max_length=1024)),
                ('sop_class_uid', models.CharField(blank=True, max_length=64, null=True)),
                ('instance_number', models.IntegerField(blank=True, null=True)),
                ('content_date', models.CharField(blank=True, max_length=8, null=True)),
                ('content_time', models.CharField(blank=True, max_length=16, null=True)),
                ('image_type', models.CharField(blank=True, max_length=255, null=True)),
                ('acquisition_number', models.IntegerField(blank=True, null=True)),
                ('rows', models.IntegerField(blank=True, null=True)),
                ('columns', models.IntegerField(blank=True, null=True)),
                ('bits_allocated', models.IntegerField(blank=True, null=True)),
                ('bits_stored', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('series', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='instances', to='pacs.series')),
            ],
            options={
                'db_table': 'instances',
                'ordering': ['instance_number'],
                'indexes': [models.Index(fields=['series'], name='instances_series_idx')],
            },
        ),
    ]
