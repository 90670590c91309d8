"""
Initial migration for Almoxarife models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Almoxarife models: Product, Movement."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('individual', 'Individual'), ('collective', 'Coletivo')], max_length=20, verbose_name='Tipo')),
                ('name', models.CharField(max_length=120, verbose_name='Produto')),
                ('color', models.CharField(blank=True, default='', max_length=60, verbose_name='Cor')),
                ('size', models.CharField(blank=True, default='', max_length=20, verbose_name='Tamanho')),
                ('code', models.CharField(editable=False, help_text='Gerado a partir de produto, cor e tamanho.', max_length=220, unique=True, verbose_name='Código')),
                ('is_active', models.BooleanField(default=True, verbose_name='Ativo')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('purchase', 'Compra'), ('delivery', 'Entrega'), ('return', 'Devolução'), ('disposal', 'Descarte')], max_length=20, verbose_name='Tipo')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantidade')),
                ('occurred_on', models.DateField(db_index=True, default=django.utils.timezone.localdate, verbose_name='Data')),
                ('holder_kind', models.CharField(blank=True, choices=[('employee', 'Funcionário'), ('post', 'Posto')], default='', max_length=20, verbose_name='Tipo de destinatário')),
                ('holder_id', models.CharField(blank=True, default='', help_text='ID do funcionário ou do posto de trabalho', max_length=64, verbose_name='Destinatário')),
                ('note', models.TextField(blank=True, default='', verbose_name='Observação')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Registrado em')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='almoxarife.product', verbose_name='Produto')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL, verbose_name='Usuário')),
            ],
            options={
                'verbose_name': 'Movimentação',
                'verbose_name_plural': 'Movimentações',
                'ordering': ['-occurred_on', '-created_at'],
                'indexes': [
                    models.Index(fields=['product', 'kind'], name='almox_mov_product_kind_idx'),
                    models.Index(fields=['holder_kind', 'holder_id'], name='almox_mov_holder_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='movement_quantity_positive'),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ('kind__in', ['delivery', 'return']),
                                ('holder_kind__in', ['employee', 'post']),
                                models.Q(('holder_id', ''), _negated=True),
                            ),
                            models.Q(
                                ('kind__in', ['purchase', 'disposal']),
                                ('holder_kind', ''),
                                ('holder_id', ''),
                            ),
                            _connector='OR',
                        ),
                        name='movement_holder_matches_kind',
                    ),
                ],
            },
        ),
    ]
