from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Counter',
            fields=[
                ('entity_type', models.CharField(max_length=40, primary_key=True, serialize=False)),
                ('value', models.PositiveBigIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name='EntityRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('namespace', models.CharField(max_length=40)),
                ('key', models.CharField(max_length=64)),
                ('data', models.JSONField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='IndexEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('relation', models.CharField(max_length=40)),
                ('parent_key', models.CharField(max_length=128)),
                ('position', models.PositiveIntegerField()),
                ('child_key', models.CharField(max_length=64)),
            ],
            options={
                'ordering': ['relation', 'parent_key', 'position'],
            },
        ),
        migrations.AddConstraint(
            model_name='entityrecord',
            constraint=models.UniqueConstraint(fields=('namespace', 'key'), name='unique_entity_record'),
        ),
        migrations.AddConstraint(
            model_name='indexentry',
            constraint=models.UniqueConstraint(
                fields=('relation', 'parent_key', 'position'), name='unique_index_position',
            ),
        ),
    ]
