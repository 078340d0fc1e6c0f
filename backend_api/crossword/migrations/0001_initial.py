import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Puzzle',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Time when the record was created.')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Time when the record was last updated.')),
                ('id', models.CharField(help_text='Puzzle identifier.', max_length=128, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('language', models.CharField(choices=[('English', 'English'), ('Russian', 'Russian'), ('Ukrainian', 'Ukrainian')], db_index=True, default='English', max_length=16)),
                ('rows', models.PositiveSmallIntegerField(db_index=True)),
                ('cols', models.PositiveSmallIntegerField()),
                ('grid', models.JSONField(help_text="Rows of single-character strings, '#' for blocked.")),
                ('revealed_letters', models.JSONField(blank=True, help_text='Optional letters to reveal.', null=True)),
            ],
            options={
                'verbose_name': 'Puzzle',
                'verbose_name_plural': 'Puzzles',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='SolvedPuzzle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(db_index=True, max_length=128)),
                ('puzzle_id', models.CharField(max_length=128)),
                ('solved_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Solved puzzle',
                'verbose_name_plural': 'Solved puzzles',
                'ordering': ['solved_at'],
                'unique_together': {('user_id', 'puzzle_id')},
            },
        ),
    ]
